"""Shared utilities for handlers."""

from __future__ import annotations

import threading

from kubernetes import client, config

_config_lock = threading.Lock()
_config_loaded = False


def load_kube_config() -> None:
    """Load cluster credentials once, preferring the in-cluster service account."""
    global _config_loaded

    with _config_lock:
        if _config_loaded:
            return
        try:
            config.load_incluster_config()
        except config.ConfigException:
            config.load_kube_config()
        _config_loaded = True


def get_k8s_client() -> client.CustomObjectsApi:
    """Get Kubernetes CustomObjectsApi client.

    Returns:
        CustomObjectsApi instance
    """
    load_kube_config()
    return client.CustomObjectsApi()


def get_core_v1_client() -> client.CoreV1Api:
    """Get Kubernetes CoreV1Api client for Secrets and ConfigMaps.

    Returns:
        CoreV1Api instance
    """
    load_kube_config()
    return client.CoreV1Api()
