#!/usr/bin/env python

"""
bunqledger - KISS bunq client
MIT License - Copyright (c) 2025 c4ffein
WARNING: I don't recommand using this as-is. This a PoC, read-only, only accounts and payments.
- The config file holds your private key and device token once installed, keep it private.
"""

import fcntl
import os
from base64 import b64encode
from dataclasses import dataclass, field
from enum import Enum
from hashlib import sha256
from http.client import HTTPException
from json import dumps, loads
from pathlib import Path
from ssl import (
    CERT_REQUIRED,
    PROTOCOL_TLS_CLIENT,
    VERIFY_X509_STRICT,
    Purpose,
    SSLCertVerificationError,
    SSLContext,
    SSLSocket,
)
from sys import argv, exit
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen
from uuid import uuid4

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

colors = {"RED": "31", "GREEN": "32", "PURP": "34", "DIM": "90", "WHITE": "39"}
Color = Enum("Color", [(k, f"\033[{v}m") for k, v in colors.items()])
COLOR_LEN = 4


TITLE = "bunqledger - KISS bunq client"

DEFAULT_ENDPOINT = "api.bunq.com"
DEFAULT_TIMEOUT = 30  # seconds, for every request
USER_KINDS = ("UserPerson", "UserCompany", "UserApiKey")
ACCOUNT_KINDS = ("MonetaryAccountBank", "MonetaryAccountSavings", "MonetaryAccountJoint")


def make_ssl_context(pinned_sha_256=None, cafile=None):
    """
    Returns a client SSLContext that verifies certs and host name.
    If `pinned_sha_256` is given, the context uses a subclass of SSLSocket that also verifies
    the sha256 of the peer certificate during the TLS handshake.
    Original code can be found at https://github.com/c4ffein/python-snippets
    """

    class PinnedSSLSocket(SSLSocket):
        def do_handshake(self, *args, **kwargs):
            r = super().do_handshake(*args, **kwargs)
            if sha256(self.getpeercert(True)).hexdigest() != pinned_sha_256:
                raise SSLCertVerificationError("Incorrect certificate checksum")
            return r

    class PinnedSSLContext(SSLContext):
        sslsocket_class = PinnedSSLSocket

    context = (SSLContext if pinned_sha_256 is None else PinnedSSLContext)(PROTOCOL_TLS_CLIENT)
    context.verify_mode, context.check_hostname = CERT_REQUIRED, True
    context.verify_flags |= VERIFY_X509_STRICT
    if cafile:
        context.load_verify_locations(cafile)
    else:
        context.load_default_certs(Purpose.SERVER_AUTH)  # May fail silently, then every handshake fails
    return context


class BunqException(Exception):
    pass


class TransportError(BunqException):
    """Network, TLS or timeout failure, no HTTP response was obtained"""


class HttpStatusError(BunqException):
    """The API answered with a non-success status"""

    def __init__(self, status, url, body=b""):
        self.status, self.url, self.body = status, url, body
        super().__init__(f"HTTP {status} on {url}: {_error_description(body)}")


class DecodeError(BunqException):
    pass


class CryptoError(BunqException):
    pass


class PersistenceError(BunqException):
    pass


def _error_description(body):
    """bunq errors look like `{"Error": [{"error_description": "..."}]}`, fall back on the raw text"""
    try:
        return " / ".join(e["error_description"] for e in loads(body)["Error"])
    except (ValueError, KeyError, TypeError):
        return body.decode(errors="replace")[:200] if isinstance(body, bytes) else str(body)[:200]


@dataclass(frozen=True)
class Pagination:
    """Cursors are paths relative to the API host, requested as-is. Only `older_url` is followed."""

    future_url: str | None = None
    newer_url: str | None = None
    older_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Pagination":
        return cls(future_url=data.get("future_url"), newer_url=data.get("newer_url"), older_url=data.get("older_url"))


@dataclass(frozen=True)
class Response:
    """Decoded envelope: `value` is a list in NORMAL mode, a single object in FLATTENED mode"""

    value: object
    pagination: Pagination | None


class Envelope(Enum):
    NORMAL = "normal"  # {"Response": [<T>, <T>, ...]}
    FLATTENED = "flattened"  # {"Response": [{"Id": ...}, {"Token": ...}]} -> one <T> built from the merged keys


def flatten_items(items: list) -> dict:
    """Merge `[{"Id": {...}}, {"Token": {...}}]` into `{"Id": {...}, "Token": {...}}`, a later key wins"""
    if not items:
        raise DecodeError("Empty response, expected at least one object")
    merged = {}
    for item in items:
        if not isinstance(item, dict) or len(item) != 1:
            raise DecodeError("Malformed response: expected a list of single-key objects")
        merged.update(item)
    return merged


def decode_response(body, envelope: Envelope, parser) -> Response:
    """
    Decode a bunq response `{"Response": [...], "Pagination": {...} | null}`.

    Args:
        body: Raw response bytes.
        envelope: Envelope.NORMAL applies `parser` to each item of `Response` and gives a list.
                  Envelope.FLATTENED merges the single-key items of `Response` and applies `parser` once.
                  Callers pick the mode matching the endpoint, it is never guessed from the payload.
        parser: Builds the typed value from a dict, usually a `from_dict` classmethod.
    """
    try:
        raw = loads(body)
    except ValueError as e:
        raise DecodeError(f"Invalid JSON in response: {e}") from e
    if not isinstance(raw, dict) or not isinstance(raw.get("Response"), list):
        raise DecodeError("Missing 'Response' list in response")
    pagination = raw.get("Pagination")
    if pagination is not None and not isinstance(pagination, dict):
        raise DecodeError(f"'Pagination' must be an object, got {type(pagination).__name__}")
    try:
        if envelope is Envelope.FLATTENED:
            value = parser(flatten_items(raw["Response"]))
        else:
            value = [parser(item) for item in raw["Response"]]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DecodeError(f"Unexpected response content: {e!r}") from e
    return Response(value=value, pagination=Pagination.from_dict(pagination) if pagination is not None else None)


@dataclass(frozen=True)
class Token:
    token: str

    @classmethod
    def from_dict(cls, data: dict) -> "Token":
        return cls(token=str(data["token"]))


@dataclass(frozen=True)
class InstallationResponse:
    """Response from /v1/installation, flattened"""

    token: Token

    @classmethod
    def from_dict(cls, data: dict) -> "InstallationResponse":
        return cls(token=Token.from_dict(data["Token"]))


@dataclass(frozen=True)
class SessionServerResponse:
    """Response from /v1/session-server, flattened. The user comes under one of USER_KINDS."""

    token: Token
    user_id: int

    @classmethod
    def from_dict(cls, data: dict) -> "SessionServerResponse":
        user_kind = next((k for k in USER_KINDS if k in data), None)
        if user_kind is None:
            raise DecodeError(f"No user in session response, expected one of {', '.join(USER_KINDS)}")
        return cls(token=Token.from_dict(data["Token"]), user_id=int(data[user_kind]["id"]))


@dataclass(frozen=True)
class Amount:
    value: str  # Decimal string as sent by the API, e.g. "-12.50"
    currency: str

    @classmethod
    def from_dict(cls, data: dict) -> "Amount":
        return cls(value=data["value"], currency=data["currency"])


@dataclass(frozen=True)
class LabelMonetaryAccount:
    """One side of a payment"""

    iban: str | None
    display_name: str
    merchant_category_code: str | None

    @classmethod
    def from_dict(cls, data: dict) -> "LabelMonetaryAccount":
        return cls(
            iban=data.get("iban"),
            display_name=data["display_name"],
            merchant_category_code=data.get("merchant_category_code"),
        )


@dataclass(frozen=True)
class Payment:
    id: int
    monetary_account_id: int
    alias: LabelMonetaryAccount
    counterparty_alias: LabelMonetaryAccount
    amount: Amount
    balance_after_mutation: Amount
    created: str
    updated: str
    description: str
    type: str
    sub_type: str

    @classmethod
    def from_dict(cls, data: dict) -> "Payment":
        return cls(
            id=data["id"],
            monetary_account_id=data["monetary_account_id"],
            alias=LabelMonetaryAccount.from_dict(data["alias"]),
            counterparty_alias=LabelMonetaryAccount.from_dict(data["counterparty_alias"]),
            amount=Amount.from_dict(data["amount"]),
            balance_after_mutation=Amount.from_dict(data["balance_after_mutation"]),
            created=data["created"],
            updated=data["updated"],
            description=data["description"],
            type=data["type"],
            sub_type=data["sub_type"],
        )

    @classmethod
    def from_wrapper(cls, data: dict) -> "Payment":
        """List items come as `{"Payment": {...}}`"""
        return cls.from_dict(data["Payment"])


@dataclass(frozen=True)
class Account:
    id: int
    description: str
    kind: str  # Wrapper key it was listed under, one of ACCOUNT_KINDS

    @classmethod
    def from_wrapper(cls, data: dict) -> "Account":
        """List items come as `{"MonetaryAccountBank": {...}}`, or another of ACCOUNT_KINDS"""
        kind = next((k for k in ACCOUNT_KINDS if k in data), None)
        if kind is None:
            raise DecodeError(f"Unknown monetary account type: {', '.join(map(str, data))}")
        return cls(id=data[kind]["id"], description=data[kind]["description"], kind=kind)


@dataclass(frozen=True)
class Session:
    """Output of the handshake, only lives in memory for this run"""

    token: str
    user_id: int


@dataclass
class InstallationState:
    """A device token is only valid for the key it was issued with, both are saved and dropped together"""

    keypair_pem: str
    device_token: str


@dataclass
class Config:
    api_key: str = ""
    state: InstallationState | None = None
    endpoint: str = DEFAULT_ENDPOINT
    cert_checksum: str | None = None
    ssl_cafile: str | None = None
    description: str = "bunqledger"
    permitted_ips: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_dict(cls, json) -> "Config":
        if not isinstance(json, dict):
            raise PersistenceError(f"Config must be an object, got {type(json).__name__}")
        config = cls()
        for key in ["api_key", "endpoint", "description"]:
            if key in json:
                if not isinstance(json[key], str):
                    raise PersistenceError(f"'{key}' must be a string, got {type(json[key]).__name__}")
                setattr(config, key, json[key])
        if not config.endpoint:
            raise PersistenceError("'endpoint' cannot be empty")
        # Optional: system CA bundle path, instead of the default certs
        config.ssl_cafile = json.get("ssl_cafile")
        if config.ssl_cafile is not None and not isinstance(config.ssl_cafile, str):
            raise PersistenceError(f"'ssl_cafile' must be a string, got {type(config.ssl_cafile).__name__}")
        if "permitted_ips" in json:
            ips = json["permitted_ips"]
            if not isinstance(ips, list) or not all(isinstance(ip, str) for ip in ips):
                raise PersistenceError("'permitted_ips' must be a list of strings")
            config.permitted_ips = ips
        # Optional certificate pinning
        certificates = json.get("certificates", {})
        if not isinstance(certificates, dict):
            raise PersistenceError(f"'certificates' must be an object, got {type(certificates).__name__}")
        bunq_cert = certificates.get("bunq")
        if bunq_cert is not None:
            if not isinstance(bunq_cert, str):
                raise PersistenceError(f"Certificate must be a string, got {type(bunq_cert).__name__}")
            bunq_cert = bunq_cert.lower()
            if len(bunq_cert) != 64:
                raise PersistenceError(f"Certificate must be 64 hex characters, got {len(bunq_cert)}")
            if any(c not in "0123456789abcdef" for c in bunq_cert):
                raise PersistenceError("Certificate must contain only hexadecimal characters (0-9, a-f)")
            config.cert_checksum = bunq_cert
        # Installation state, written by the handshake
        if json.get("state") is not None:
            state = json["state"]
            if not isinstance(state, dict):
                raise PersistenceError(f"'state' must be an object, got {type(state).__name__}")
            for key in ["keypair_pem", "device_token"]:
                if key not in state:
                    raise PersistenceError(f"Missing 'state.{key}' field in config")
                if not isinstance(state[key], str):
                    raise PersistenceError(f"'state.{key}' must be a string, got {type(state[key]).__name__}")
            config.state = InstallationState(keypair_pem=state["keypair_pem"], device_token=state["device_token"])
        return config

    def to_dict(self) -> dict:
        return {
            "api_key": self.api_key,
            "endpoint": self.endpoint,
            "description": self.description,
            "permitted_ips": self.permitted_ips,
            **({"certificates": {"bunq": self.cert_checksum}} if self.cert_checksum is not None else {}),
            **({"ssl_cafile": self.ssl_cafile} if self.ssl_cafile is not None else {}),
            **({"state": vars(self.state)} if self.state is not None else {}),
        }


def generate_private_key():
    try:
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CryptoError(f"Key generation failed: {e}") from e


def load_private_key(pem: str):
    try:
        key = serialization.load_pem_private_key(pem.encode(), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CryptoError(f"Invalid private key in config: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise CryptoError(f"Expected an RSA private key, got {type(key).__name__}")
    return key


def private_key_to_pem(key) -> str:
    try:
        return key.private_bytes(
            serialization.Encoding.PEM, serialization.PrivateFormat.TraditionalOpenSSL, serialization.NoEncryption()
        ).decode()
    except (AttributeError, ValueError, TypeError) as e:
        raise CryptoError(f"Cannot serialize private key: {e}") from e


def public_key_to_pem(key) -> str:
    try:
        return (
            key.public_key()
            .public_bytes(serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo)
            .decode()
        )
    except (AttributeError, ValueError, TypeError) as e:
        raise CryptoError(f"Cannot serialize public key: {e}") from e


def sign(body: bytes, key) -> str:
    """RSA PKCS#1 v1.5 + SHA-256 over the exact bytes sent as request body, base64 for the header"""
    try:
        signature = key.sign(body, padding.PKCS1v15(), hashes.SHA256())
    except (AttributeError, TypeError, ValueError, UnsupportedAlgorithm) as e:
        raise CryptoError(f"Signing failed: {e}") from e
    return b64encode(signature).decode()


def _headers(authentication=None, signature=None):
    return {
        "User-Agent": "bunqledger",
        "Cache-Control": "no-cache",
        "X-Bunq-Client-Request-Id": str(uuid4()),
        **({"X-Bunq-Client-Authentication": authentication} if authentication is not None else {}),
        **({"X-Bunq-Client-Signature": signature} if signature is not None else {}),
    }


def _send(request, cert_checksum, cafile, timeout):
    try:
        context = make_ssl_context(cert_checksum, cafile=cafile)
        with urlopen(request, context=context, timeout=timeout) as r:
            return r.read()
    except HTTPError as e:
        raise HttpStatusError(e.code, request.full_url, e.read()) from e
    except (URLError, OSError, HTTPException) as e:  # TLS errors and timeouts are OSError, cut bodies not
        raise TransportError(f"Request to {request.full_url} failed: {e}") from e


def get_body(addr, url, authentication=None, cert_checksum=None, cafile=None, timeout=DEFAULT_TIMEOUT):
    """GET an API path, returns the raw response bytes"""
    request = Request("https://" + (addr + url).decode(), None, headers=_headers(authentication))
    return _send(request, cert_checksum, cafile, timeout)


def post_body(
    addr,
    url,
    body,
    authentication=None,
    signature=None,
    cert_checksum=None,
    cafile=None,
    timeout=DEFAULT_TIMEOUT,
):
    """
    POST a JSON body to an API path, returns the raw response bytes.

    Args:
        body: Already serialized bytes, sent untouched so that a signature over them stays valid.
    """
    headers = {**_headers(authentication, signature), "Content-Type": "application/json"}
    request = Request("https://" + (addr + url).decode(), body, headers=headers, method="POST")
    return _send(request, cert_checksum, cafile, timeout)


class CredentialStore:
    """Holds the config and the handshake state between runs, the only place allowed to persist anything"""

    def load(self) -> Config:
        raise NotImplementedError

    def save(self, config: Config) -> None:
        raise NotImplementedError

    def reset(self) -> None:
        """Forget the installation, the next handshake registers a new key and device"""
        config = self.load()
        config.state = None
        self.save(config)


class FileCredentialStore(CredentialStore):
    def __init__(self, path=None):
        self.path = Path(path) if path is not None else Path.home() / ".config" / "bunqledger" / "config.json"
        self.lock_path = self.path.with_suffix(".lock")

    def load(self) -> Config:
        try:
            with self.path.open() as f:
                content = f.read()
        except FileNotFoundError:
            return Config()
        except OSError as e:
            raise PersistenceError(f"Cannot read config {self.path}: {e}") from e
        try:
            json = loads(content)
        except ValueError as e:
            raise PersistenceError(f"Invalid JSON in config {self.path}: {e}") from e
        return Config.from_dict(json)

    def reset(self) -> None:
        if not self.path.exists():
            return  # Nothing installed, do not create a config with an empty api key
        super().reset()

    def save(self, config: Config) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Separate lock file + atomic write, the key must never be half-written
            with self.lock_path.open("a") as lock:
                fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
                try:
                    temp_path = self.path.with_suffix(".tmp")
                    with temp_path.open("w") as f:
                        os.fchmod(f.fileno(), 0o600)  # Holds the private key
                        f.write(dumps(config.to_dict(), indent=2))
                        f.flush()
                        os.fsync(f.fileno())
                    temp_path.rename(self.path)
                finally:
                    fcntl.flock(lock.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            raise PersistenceError(f"Cannot save config {self.path}: {e}") from e


class HandshakeClient:
    """
    Obtains a bunq session: installation -> device registration -> session creation.

    Installation and device registration only run when the store has no state yet,
    their result (key + device token) is saved before going further.
    Session creation runs every time, the Session is returned and never persisted.
    Nothing is retried: the first failure aborts the handshake.
    """

    def __init__(self, store: CredentialStore):
        self.store = store

    @staticmethod
    def _post(config, url, body, **headers):
        return post_body(
            config.endpoint.encode(), url, body, cert_checksum=config.cert_checksum, cafile=config.ssl_cafile, **headers
        )

    def create_installation(self, config, key) -> str:
        """Registers the public key, unsigned. Returns the installation token."""
        body = dumps({"client_public_key": public_key_to_pem(key)}).encode()
        raw = self._post(config, b"/v1/installation", body)
        return decode_response(raw, Envelope.FLATTENED, InstallationResponse.from_dict).value.token.token

    def register_device(self, config, installation_token) -> None:
        """
        Binds the api key to the installation. Authenticated by the installation token, unsigned.
        Any 2xx is a success, the body is not needed.
        """
        body = dumps(
            {"description": config.description, "secret": config.api_key, "permitted_ips": config.permitted_ips}
        ).encode()
        self._post(config, b"/v1/device-server", body, authentication=installation_token)
        print(f"{Color.DIM.value}Device registered: {Color.PURP.value}{config.description}{Color.WHITE.value}")

    def create_session(self, config, key) -> Session:
        body = dumps({"secret": config.api_key}).encode()
        signature = sign(body, key)
        raw = self._post(
            config, b"/v1/session-server", body, authentication=config.state.device_token, signature=signature
        )
        response = decode_response(raw, Envelope.FLATTENED, SessionServerResponse.from_dict).value
        return Session(token=response.token.token, user_id=response.user_id)

    def install(self) -> Session:
        config = self.store.load()
        if not config.api_key:
            raise BunqException("Missing 'api_key' in config, see `bunqledger help config`")
        if config.state is None:
            print(f"{Color.DIM.value}No installation found, registering a new key pair...{Color.WHITE.value}")
            key = generate_private_key()
            installation_token = self.create_installation(config, key)
            self.register_device(config, installation_token)
            config.state = InstallationState(keypair_pem=private_key_to_pem(key), device_token=installation_token)
            self.store.save(config)
        else:
            key = load_private_key(config.state.keypair_pem)
        return self.create_session(config, key)


class ResourceClient:
    """Read-only access to accounts and payments with an established Session"""

    def __init__(self, session: Session, endpoint=DEFAULT_ENDPOINT, cert_checksum=None, ssl_cafile=None):
        self.session = session
        self.endpoint = endpoint.encode()
        self.cert_checksum = cert_checksum
        self.ssl_cafile = ssl_cafile

    @classmethod
    def from_config(cls, session: Session, config: Config) -> "ResourceClient":
        return cls(session, config.endpoint, cert_checksum=config.cert_checksum, ssl_cafile=config.ssl_cafile)

    def _get(self, url):
        return get_body(
            self.endpoint,
            url,
            authentication=self.session.token,
            cert_checksum=self.cert_checksum,
            cafile=self.ssl_cafile,
        )

    def monetary_accounts(self) -> list[Account]:
        """Single page, no pagination followed"""
        url = f"/v1/user/{self.session.user_id}/monetary-account".encode()
        return decode_response(self._get(url), Envelope.NORMAL, Account.from_wrapper).value

    def payments(self, account: Account) -> list[Payment]:
        """
        All payments of an account, newest first, following `older_url` until the last page.
        One request per page. A failing page raises, pages already fetched are dropped.
        """
        url = f"/v1/user/{self.session.user_id}/monetary-account/{account.id}/payment".encode()
        payments = []
        while url is not None:
            page = decode_response(self._get(url), Envelope.NORMAL, Payment.from_wrapper)
            payments.extend(page.value)
            older_url = page.pagination.older_url if page.pagination is not None else None
            url = older_url.encode() if older_url else None
        return payments


def usage():
    output_lines = [
        TITLE,
        "─" * len(TITLE),
        "- bunqledger help                 ==> show this help",
        "  + config                        ==> helps you with the configuration file",
        "─" * len(TITLE),
        "- bunqledger                      ==> list accounts",
        "- bunqledger payments             ==> list payments of the first account",
        "  + index                         ==> list payments of the account at this index instead",
        "- bunqledger reset                ==> forget the installation, next run registers a new device",
        "─" * len(TITLE),
        "Read-only, only accounts and payments for now",
    ]
    print("\n" + "\n".join(output_lines) + "\n")
    return -1


def help_config():
    output_lines = [
        TITLE,
        "─" * len(TITLE),
        "Configuration",
        "─" * len(TITLE),
        "",
        f"{Color.PURP.value}Config file location:{Color.WHITE.value}",
        "  ~/.config/bunqledger/config.json",
        "",
        f"{Color.PURP.value}Example configuration:{Color.WHITE.value}",
        "  {",
        '    "api_key": "your_api_key_here",',
        f"    {Color.DIM.value}# Optional:{Color.WHITE.value}",
        '    "endpoint": "public-api.sandbox.bunq.com",',
        '    "description": "bunqledger",',
        '    "permitted_ips": ["*"],',
        '    "certificates": {',
        '      "bunq": "sha256_hash_of_der_certificate"',
        "    },",
        '    "ssl_cafile": "/path/to/ca-bundle.crt"',
        "  }",
        "",
        f"{Color.PURP.value}Required fields:{Color.WHITE.value}",
        "  • api_key                - API key from the bunq app",
        "",
        f"{Color.PURP.value}Optional fields:{Color.WHITE.value}",
        f"  • endpoint               - API host, defaults to {DEFAULT_ENDPOINT}",
        "  • description            - Device name shown in the bunq app",
        "  • permitted_ips          - IPs allowed to use the api key, defaults to any",
        "  • certificates.bunq      - SHA256 hash of DER cert (64 hex chars), enables pinning",
        "  • ssl_cafile             - Path to system CA bundle",
        "",
        f"{Color.PURP.value}Installation state:{Color.WHITE.value}",
        "  The first run adds a 'state' entry (private key + device token) to the config file.",
        "  `bunqledger reset` drops it, a new device is then registered.",
        "",
        "─" * len(TITLE),
    ]
    print("\n" + "\n".join(output_lines) + "\n")
    return 0


def print_accounts(accounts):
    print(f"{TITLE}\n{'─' * len(TITLE)}")
    for i, a in enumerate(accounts):
        index = f" #{i} "
        description = f"{Color.WHITE.value} {a.description}{Color.DIM.value} "
        print(
            f"{Color.DIM.value}─"
            f"{Color.PURP.value}{index}"
            f"{Color.DIM.value}─"
            f"{description.ljust(40 + COLOR_LEN * 2, '─')}"
            f"{Color.DIM.value}─ {Color.WHITE.value}{a.id} {Color.DIM.value}{a.kind}{Color.WHITE.value}"
        )


def print_payments(payments):
    for p in payments:
        short_id = f" {str(p.id)[-6:]} "
        label = f"{Color.WHITE.value} {p.counterparty_alias.display_name}{Color.DIM.value} "
        money_str = Color.RED.value if p.amount.value.startswith("-") else Color.GREEN.value
        money_str += f" {p.amount.value} {p.amount.currency} "
        print(
            f"{Color.DIM.value}─"
            f"{Color.PURP.value}{short_id}"
            f"{Color.DIM.value}─"
            f"{label.ljust(60 + COLOR_LEN * 2, '─')}"
            f"{money_str.rjust(20 + COLOR_LEN, '─')}"
            f"{Color.DIM.value}─"
            f"{Color.PURP.value} {p.created[:10]}{Color.WHITE.value}"
        )
    print(f"{Color.DIM.value}{len(payments)} payments{Color.WHITE.value}")


def main():
    # Check for help command before loading config
    if len(argv) >= 2 and argv[1] == "help":
        if len(argv) == 3 and argv[2] == "config":
            return help_config()
        return usage()

    store = FileCredentialStore()
    if len(argv) == 2 and argv[1] == "reset":
        store.reset()
        print(f"{Color.GREEN.value}✓ Installation state dropped{Color.WHITE.value}")
        return 0
    try:
        config = store.load()
    except PersistenceError:
        return usage()
    if not config.api_key:
        return usage()
    if len(argv) < 2 or argv[1] == "accounts":
        session = HandshakeClient(store).install()
        return print_accounts(ResourceClient.from_config(session, config).monetary_accounts())
    if argv[1] == "payments":
        if len(argv) > 3:
            return usage()
        if len(argv) == 3 and not argv[2].isdigit():
            raise BunqException(f"Account index must be a number, got: {argv[2]}")
        index = int(argv[2]) if len(argv) == 3 else 0
        session = HandshakeClient(store).install()
        client = ResourceClient.from_config(session, config)
        accounts = client.monetary_accounts()
        if index >= len(accounts):
            raise BunqException(f"No account #{index}, found {len(accounts)}")
        return print_payments(client.payments(accounts[index]))
    return usage()


def run():
    try:
        main()
    except BunqException as e:
        print(f"{Color.RED.value}\n  !!  {e}  !!  \n")
        exit(-1)


if __name__ == "__main__":
    run()
