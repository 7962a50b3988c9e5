import json

import pytest
from flask import request

from riff.activitypub.signature import SignatureHeader, VerificationError, VerificationFormatError, body_digest, \
    generate_keypair, request_target, signed_headers, verify_request

INBOX = 'https://riff.test/users/carol/inbox'


def signed_post(app, body, headers):
    # the Host header comes from base_url
    headers = {name: value for name, value in headers.items() if name != 'Host'}
    return app.test_request_context('/users/carol/inbox', base_url='https://riff.test', method='POST', data=body,
                                    headers=headers)


@pytest.fixture(scope='module')
def keypair():
    return generate_keypair()


class TestSignatureHeader:
    def test_parse_mastodon_header(self):
        header = SignatureHeader.parse('keyId="https://remote.example/users/alice#main-key",algorithm="rsa-sha256",'
                                       'headers="(request-target) host date digest content-type",signature="c2ln"')
        assert header.key_id == 'https://remote.example/users/alice#main-key'
        assert header.algorithm == 'rsa-sha256'
        assert header.headers == ['(request-target)', 'host', 'date', 'digest', 'content-type']
        assert header.signature == b'sig'

    def test_algorithm_defaults_to_hs2019(self):
        assert SignatureHeader.parse('keyId="k",headers="date",signature="c2ln"').algorithm == 'hs2019'

    def test_missing_parts(self):
        with pytest.raises(VerificationFormatError):
            SignatureHeader.parse('keyId="k",signature="c2ln"')
        with pytest.raises(VerificationFormatError):
            SignatureHeader.parse('nonsense')
        with pytest.raises(VerificationFormatError):
            SignatureHeader.parse('keyId="k",headers="date",signature="not base64!"')

    def test_request_target(self):
        assert request_target('POST', '/inbox') == 'post /inbox'
        assert request_target('get', '/users/carol', 'page=2') == 'get /users/carol?page=2'


class TestVerifyRequest:
    def test_signed_request_verifies(self, app, keypair):
        private_key, public_key = keypair
        body = json.dumps({'type': 'Like'}).encode('utf-8')
        headers = signed_headers('post', INBOX, body, private_key, 'https://riff.test/users/carol#main-key')
        assert headers['Digest'] == body_digest(body)
        with signed_post(app, body, headers):
            verify_request(request, public_key)

    def test_other_key(self, app, keypair):
        private_key, _ = keypair
        _, other_public_key = generate_keypair()
        body = b'{}'
        with signed_post(app, body, signed_headers('post', INBOX, body, private_key, 'k')):
            with pytest.raises(VerificationError):
                verify_request(request, other_public_key)

    def test_body_changed_after_signing(self, app, keypair):
        private_key, public_key = keypair
        headers = signed_headers('post', INBOX, b'{"type": "Like"}', private_key, 'k')
        with signed_post(app, b'{"type": "Announce"}', headers):
            with pytest.raises(VerificationError):
                verify_request(request, public_key)

    def test_body_must_be_covered(self, app, keypair):
        _, public_key = keypair
        header = SignatureHeader(key_id='k', headers=['(request-target)', 'host', 'date'], signature=b'x')
        with signed_post(app, b'{}', {'Signature': header.compile()}):
            with pytest.raises(VerificationFormatError):
                verify_request(request, public_key)

    def test_unsigned(self, app, keypair):
        with signed_post(app, b'{}', {}):
            with pytest.raises(VerificationFormatError):
                verify_request(request, keypair[1])

    def test_unusable_public_key(self, app, keypair):
        body = b'{}'
        with signed_post(app, body, signed_headers('post', INBOX, body, keypair[0], 'k')):
            with pytest.raises(VerificationFormatError):
                verify_request(request, 'PUBLIC')
