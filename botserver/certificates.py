"""TLS key and certificate generation."""

import asyncio
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Tuple, Union

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from botserver.logging_utils import log_event
from botserver.models import CertificateBundle

DEFAULT_SSL_DIR = Path(__file__).resolve().parent.parent / "ssl"
KEY_FILE_NAME = "key.pem"
CERT_FILE_NAME = "cert.pem"
DEFAULT_SSL_KEY = str(DEFAULT_SSL_DIR / KEY_FILE_NAME)
DEFAULT_SSL_CERT = str(DEFAULT_SSL_DIR / CERT_FILE_NAME)
DEFAULT_CERT_DAYS = 365
KEY_SIZE = 2048


def default_credential_paths(output_dir: Union[str, Path]) -> Tuple[str, str]:
    """Return (key path, cert path) inside ``output_dir``."""
    output_dir = Path(output_dir)
    return str(output_dir / KEY_FILE_NAME), str(output_dir / CERT_FILE_NAME)


def _new_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=KEY_SIZE)


def _key_pem(key: rsa.RSAPrivateKey) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


def create_certificate(
    days: int = DEFAULT_CERT_DAYS,
    self_signed: bool = True,
    common_name: str = "localhost",
) -> CertificateBundle:
    """
    Generate a key and a certificate valid for ``days`` days.

    A self-signed certificate is signed by its own key. Otherwise a
    separate service key is generated and signs the certificate under a
    CA subject.
    """
    if days < 1:
        raise ValueError(f"days must be positive, got {days}")

    key = _new_key()
    service_key = key if self_signed else _new_key()

    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    if self_signed:
        issuer = subject
    else:
        issuer = x509.Name(
            [x509.NameAttribute(NameOID.COMMON_NAME, f"{common_name} CA")]
        )

    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=days))
        .add_extension(
            x509.SubjectAlternativeName([x509.DNSName(common_name)]),
            critical=False,
        )
        .sign(service_key, hashes.SHA256())
    )

    return CertificateBundle(
        private_key=_key_pem(key),
        certificate=certificate.public_bytes(serialization.Encoding.PEM).decode(
            "ascii"
        ),
        service_key=_key_pem(service_key),
    )


async def generate_certificate(
    days: int = DEFAULT_CERT_DAYS, self_signed: bool = True, **kwargs
) -> CertificateBundle:
    """Generate a certificate in a worker thread."""
    return await asyncio.to_thread(
        create_certificate, days=days, self_signed=self_signed, **kwargs
    )


async def ensure_default_certificate(
    output_dir: Union[str, Path] = DEFAULT_SSL_DIR,
    days: int = DEFAULT_CERT_DAYS,
    self_signed: bool = True,
) -> bool:
    """
    Make sure a key and certificate exist in ``output_dir``.

    Nothing is generated or written when both files exist. If either is
    missing a fresh pair is generated and both files are written, so the
    key always matches the certificate. Generation errors propagate and
    leave the directory untouched.

    Concurrent calls against the same directory are not serialized.
    """
    key_path, cert_path = default_credential_paths(output_dir)
    key_exists = os.path.exists(key_path)
    cert_exists = os.path.exists(cert_path)

    if key_exists and cert_exists:
        return True

    log_event(
        "Generating TLS certificate",
        key=key_path,
        cert=cert_path,
        days=days,
        self_signed=self_signed,
    )
    bundle = await generate_certificate(days=days, self_signed=self_signed)

    Path(output_dir).mkdir(parents=True, exist_ok=True)
    Path(key_path).write_text(bundle.private_key, encoding="ascii")
    Path(cert_path).write_text(bundle.certificate, encoding="ascii")

    return True
