"""Kafka broker provisioner, KRaft cluster identity bootstrap and smoke test."""
