"""
Content Encoding
================

Brotli compression for the script route and the policy that decides whether
a response is compressed.
"""

from typing import Dict, Optional, Tuple

import brotli

from tls_smoke.models.schemas import CompressionPolicy

BROTLI = "br"
IDENTITY = "identity"


def parse_accept_encoding(header: Optional[str]) -> Dict[str, float]:
    """
    Parse an ``accept-encoding`` header into codings and their q-values.

    Malformed q-values count as 0 so the coding is treated as refused.
    """
    codings: Dict[str, float] = {}
    if not header:
        return codings

    for item in header.split(","):
        parts = [part.strip() for part in item.split(";")]
        coding = parts[0].lower()
        if not coding:
            continue

        quality = 1.0
        for param in parts[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        codings[coding] = quality

    return codings


def accepts_brotli(header: Optional[str]) -> bool:
    """Whether the client declared it can decode brotli."""
    codings = parse_accept_encoding(header)
    if BROTLI in codings:
        return codings[BROTLI] > 0
    return codings.get("*", 0) > 0


def should_compress(policy: CompressionPolicy, accept_encoding: Optional[str]) -> bool:
    if policy is CompressionPolicy.ALWAYS:
        return True
    return accepts_brotli(accept_encoding)


def encode_body(
    body: bytes,
    policy: CompressionPolicy,
    accept_encoding: Optional[str],
    quality: int = 11,
) -> Tuple[bytes, str]:
    """
    Apply the compression policy to a response body.

    Returns:
        The body to send and the coding it is in (``br`` or ``identity``)
    """
    if should_compress(policy, accept_encoding):
        return brotli.compress(body, quality=quality), BROTLI
    return body, IDENTITY
