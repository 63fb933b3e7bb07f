"""Host Bridge: expose host state to Home Assistant over MQTT."""
