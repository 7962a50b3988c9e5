# Signing and verification follow the approach of the HTTP signature code in Takahe https://github.com/jointakahe/takahe
#
# Copyright 2022 Andrew Godwin
#
# Redistribution and use in source and binary forms, with or without modification,
# are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice, this
# list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright notice,
# this list of conditions and the following disclaimer in the documentation and/or
# other materials provided with the distribution.
#
# 3. Neither the name of the copyright holder nor the names of its contributors
# may be used to endorse or promote products derived from this software without
# specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND
# ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED
# WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE FOR
# ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES
# (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON
# ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT
# (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS
# SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
"""
HTTP signatures as used between ActivityPub servers (draft-cavage-http-signatures-12, rsa-sha256)

Inbound: verify_request checks the Digest of the body and the Signature header of a Flask request against the
sender's public key.
Outbound: signed_headers produces the Date, Digest and Signature headers for a delivery.
"""
from __future__ import annotations
from dataclasses import dataclass
from email.utils import formatdate
from typing import Callable, cast
from urllib.parse import urlparse
import base64

import arrow
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from flask import Request

# hs2019 lets the key decide the algorithm; for the RSA keys used on the fediverse that is rsa-sha256
SIGNATURE_ALGORITHMS = ('rsa-sha256', 'hs2019')


class VerificationError(Exception):
    """The signature does not match the request"""
    pass


class VerificationFormatError(VerificationError):
    """The request is not signed in a form we understand"""
    pass


def generate_keypair() -> tuple[str, str]:
    """A fresh 2048 bit RSA keypair as (private PKCS8 PEM, public SubjectPublicKeyInfo PEM)"""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(encoding=serialization.Encoding.PEM,
                                            format=serialization.PrivateFormat.PKCS8,
                                            encryption_algorithm=serialization.NoEncryption())
    public_pem = private_key.public_key().public_bytes(encoding=serialization.Encoding.PEM,
                                                       format=serialization.PublicFormat.SubjectPublicKeyInfo)
    return private_pem.decode('ascii'), public_pem.decode('ascii')


def http_date() -> str:
    return formatdate(arrow.utcnow().timestamp(), usegmt=True)


def body_digest(body: bytes) -> str:
    digest = hashes.Hash(hashes.SHA256())
    digest.update(body)
    return 'SHA-256=' + base64.b64encode(digest.finalize()).decode('ascii')


@dataclass
class SignatureHeader:
    key_id: str
    headers: list[str]
    signature: bytes
    algorithm: str = 'rsa-sha256'

    @classmethod
    def parse(cls, value: str) -> SignatureHeader:
        params = {}
        for item in value.split(','):
            name, sep, param = item.partition('=')
            if not sep:
                raise VerificationFormatError(f'Malformed signature parameter {item.strip()!r}')
            params[name.strip().lower()] = param.strip().strip('"')
        missing = [name for name in ('keyid', 'headers', 'signature') if name not in params]
        if missing:
            raise VerificationFormatError('Signature header has no ' + ', '.join(missing))
        try:
            signature = base64.b64decode(params['signature'], validate=True)
        except ValueError:
            raise VerificationFormatError('Signature is not base64')
        return cls(key_id=params['keyid'], headers=params['headers'].lower().split(), signature=signature,
                   algorithm=params.get('algorithm', 'hs2019'))

    def compile(self) -> str:
        return (f'keyId="{self.key_id}",algorithm="{self.algorithm}",headers="{" ".join(self.headers)}",'
                f'signature="{base64.b64encode(self.signature).decode("ascii")}"')


def signing_string(header_names: list[str], value_of: Callable[[str], str]) -> str:
    return '\n'.join(f'{name}: {value_of(name)}' for name in header_names)


def request_target(method: str, path: str, query: str = '') -> str:
    return f'{method.lower()} {path}?{query}' if query else f'{method.lower()} {path}'


def verify_request(request: Request, public_key: str):
    """Raise VerificationError unless the request is signed by the holder of public_key and its body is intact"""
    if 'Digest' in request.headers:
        if request.headers['Digest'] != body_digest(request.get_data()):
            raise VerificationError('Digest does not match the body')
    if 'Signature' not in request.headers:
        raise VerificationFormatError('No signature header present')
    header = SignatureHeader.parse(request.headers['Signature'])
    if header.algorithm not in SIGNATURE_ALGORITHMS:
        raise VerificationFormatError(f'Unsupported signature algorithm {header.algorithm}')
    if request.get_data() and 'digest' not in header.headers:
        raise VerificationFormatError('Body is not covered by the signature')

    def value_of(name: str) -> str:
        if name == '(request-target)':
            return request_target(request.method, request.path, request.query_string.decode('utf-8'))
        return request.headers.get(name, '')

    try:
        key = serialization.load_pem_public_key(public_key.encode('ascii'))
    except ValueError as e:
        raise VerificationFormatError(f'Unusable public key: {e}')
    if not isinstance(key, rsa.RSAPublicKey):
        raise VerificationFormatError('Only RSA keys are supported')
    try:
        key.verify(header.signature, signing_string(header.headers, value_of).encode('utf-8'), padding.PKCS1v15(),
                   hashes.SHA256())
    except InvalidSignature:
        raise VerificationError('Signature mismatch')


def signed_headers(method: str, uri: str, body: bytes | None, private_key: str, key_id: str,
                   content_type: str = 'application/activity+json') -> dict[str, str]:
    """Headers for a request to uri, signed over the request target, host, date and (for a body) digest"""
    if '://' not in uri:
        raise ValueError('URI does not contain a scheme')
    parts = urlparse(uri)
    values = {
        '(request-target)': request_target(method, parts.path or '/', parts.query),
        'host': parts.netloc,
        'date': http_date(),
    }
    if body is not None:
        values['digest'] = body_digest(body)
        values['content-type'] = content_type
    key = cast(rsa.RSAPrivateKey, serialization.load_pem_private_key(private_key.encode('ascii'), password=None))
    signature = key.sign(signing_string(list(values), values.get).encode('utf-8'), padding.PKCS1v15(),
                         hashes.SHA256())
    headers = {name.title(): value for name, value in values.items() if name != '(request-target)'}
    headers['Signature'] = SignatureHeader(key_id=key_id, headers=list(values), signature=signature).compile()
    return headers
