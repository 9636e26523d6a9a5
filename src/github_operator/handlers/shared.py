"""Shared utilities for handlers."""

from __future__ import annotations

from kubernetes import client

from ..builders.forge import create_forge_client_from_env
from ..services.github.client import GitHubClient
from ..services.kube.store import KubernetesStore


def load_k8s_config() -> None:
    """Load in-cluster config, falling back to the local kubeconfig."""
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


def get_k8s_client() -> client.CustomObjectsApi:
    """Get Kubernetes CustomObjectsApi client.

    Returns:
        CustomObjectsApi instance
    """
    load_k8s_config()
    return client.CustomObjectsApi()


def get_store() -> KubernetesStore:
    """Get a resource store bound to the cluster.

    Returns:
        KubernetesStore instance
    """
    custom_api = get_k8s_client()
    return KubernetesStore(custom_api, client.CoreV1Api())


def get_forge_client() -> GitHubClient:
    """Get the forge client configured from the environment.

    Returns:
        GitHubClient instance
    """
    return create_forge_client_from_env()
