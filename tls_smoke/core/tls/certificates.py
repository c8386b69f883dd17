"""
Self-Signed Certificates
========================

Ephemeral RSA key pair and self-signed X.509 certificate for ``localhost``,
generated in memory and returned as PEM bytes.
"""

from datetime import datetime, timezone
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from tls_smoke.config.logging import get_logger
from tls_smoke.models.schemas import CertificateBundle

logger = get_logger(__name__)

KEY_SIZE = 2048
PUBLIC_EXPONENT = 65537
SERIAL_NUMBER = 0xE5067BE47FE1CA7E
COMMON_NAME = "localhost"


def one_year_after(moment: datetime) -> datetime:
    """Same instant one calendar year later; 29 February maps to 28 February."""
    try:
        return moment.replace(year=moment.year + 1)
    except ValueError:
        return moment.replace(year=moment.year + 1, day=28)


def create_cert(
    common_name: str = COMMON_NAME, now: Optional[datetime] = None
) -> CertificateBundle:
    """
    Generate a key pair and a self-signed certificate.

    Args:
        common_name: Subject and issuer common name
        now: Start of the validity period, defaults to the current time

    Returns:
        CertificateBundle with the PEM encoded key and certificate
    """
    # X.509 validity has whole second resolution
    not_before = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    not_after = one_year_after(not_before)

    private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=KEY_SIZE)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])

    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(SERIAL_NUMBER)
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(common_name)]), critical=False)
        .sign(private_key, hashes.SHA256())
    )

    logger.debug(
        "Generated self-signed certificate",
        common_name=common_name,
        not_before=not_before.isoformat(),
        not_after=not_after.isoformat(),
    )

    return CertificateBundle(
        key=private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        cert=cert.public_bytes(serialization.Encoding.PEM),
    )
