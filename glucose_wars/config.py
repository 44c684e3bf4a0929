"""Environment-driven settings, read through small accessors so tests can monkeypatch env."""

from __future__ import annotations

import os

import redis


def get_redis_url() -> str:
    return os.environ.get("REDIS_URL", "redis://localhost:6379/0")


def create_redis() -> redis.Redis:
    # decode_responses=True => stream fields come back as str
    return redis.Redis.from_url(get_redis_url(), decode_responses=True)


def get_default_tier() -> str:
    return os.environ.get("GLUCOSE_WARS_DEFAULT_TIER", "tier1")


def get_randomness_timeout() -> float:
    return float(os.environ.get("GLUCOSE_WARS_RANDOMNESS_TIMEOUT_S", "0.5"))


def get_vrf_key() -> bytes:
    return os.environ.get("GLUCOSE_WARS_VRF_KEY", "glucose-wars-dev-key").encode()
