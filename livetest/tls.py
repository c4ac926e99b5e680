"""
Self-signed certificate material for the HTTPS live server.
"""
import logging
import os
import shutil
import subprocess

from livetest.errors import CertificateError

logger = logging.getLogger(__name__)

OPENSSL_PATH = os.environ.get('OPENSSL', 'openssl')


def ensure_certificate(key_file, cert_file, common_name='localhost', days=30):
    """Generate a self-signed key/certificate pair unless both already exist"""
    if os.path.exists(key_file) and os.path.exists(cert_file):
        logger.debug(f"Reusing TLS material {cert_file}")
        return key_file, cert_file

    if shutil.which(OPENSSL_PATH) is None:
        raise CertificateError(f"openssl binary not found at {OPENSSL_PATH}; cannot create TLS material")

    for path in (key_file, cert_file):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    cmd = [
        OPENSSL_PATH, 'req', '-x509', '-newkey', 'rsa:2048', '-nodes',
        '-keyout', key_file,
        '-out', cert_file,
        '-days', str(days),
        '-subj', f'/CN={common_name}',
    ]
    logger.info(f"Generating self-signed certificate in {os.path.dirname(cert_file) or '.'}")
    result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    if result.returncode != 0:
        raise CertificateError(
            f"openssl exited with {result.returncode}.\n"
            f"Stderr: {result.stderr.decode('utf-8', errors='replace')}"
        )
    return key_file, cert_file
