"""Utilities for managing the TLS secrets written by the agent."""

from __future__ import annotations

import base64
from typing import Any, Optional

from ..constants import (
    LABEL_MANAGED_BY,
    MANAGED_BY_VALUE,
    SECRET_TYPE_TLS,
    TLS_CERT_KEY,
    TLS_KEY_KEY,
)


def encode_tls_data(certificate: bytes, private_key: bytes) -> dict[str, str]:
    """Encode a certificate and its key as secret data.

    Args:
        certificate: PEM encoded certificate chain
        private_key: PEM encoded private key

    Returns:
        Secret data (base64 encoded, as on the wire)
    """
    return {
        TLS_CERT_KEY: base64.b64encode(certificate).decode("ascii"),
        TLS_KEY_KEY: base64.b64encode(private_key).decode("ascii"),
    }


def build_tls_secret(
    name: str,
    namespace: str,
    certificate: bytes,
    private_key: bytes,
    owner_reference: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Build a kubernetes.io/tls secret.

    Args:
        name: Name of the secret
        namespace: Namespace for the secret
        certificate: PEM encoded certificate chain
        private_key: PEM encoded private key
        owner_reference: Optional owner of the secret

    Returns:
        Secret object
    """
    metadata: dict[str, Any] = {
        "name": name,
        "namespace": namespace,
        "labels": {LABEL_MANAGED_BY: MANAGED_BY_VALUE},
    }
    if owner_reference is not None:
        metadata["ownerReferences"] = [owner_reference]

    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": metadata,
        "type": SECRET_TYPE_TLS,
        "data": encode_tls_data(certificate, private_key),
    }


def append_owner_reference(
    references: list[dict[str, Any]],
    reference: dict[str, Any],
) -> list[dict[str, Any]]:
    """Add an owner reference unless an identical one is already present.

    Args:
        references: Existing owner references
        reference: Owner reference to add

    Returns:
        A new list of owner references
    """
    fields = ("apiVersion", "kind", "name", "uid")
    wanted = tuple(reference.get(f) for f in fields)
    for existing in references:
        if tuple(existing.get(f) for f in fields) == wanted:
            return list(references)
    return [*references, reference]


def remove_owner_reference(
    references: list[dict[str, Any]],
    uid: str,
) -> list[dict[str, Any]]:
    """Drop the owner references pointing to an owner.

    Args:
        references: Existing owner references
        uid: UID of the owner to drop

    Returns:
        A new list of owner references
    """
    return [ref for ref in references if ref.get("uid") != uid]
