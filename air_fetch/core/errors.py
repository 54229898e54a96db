# air_fetch/core/errors.py
from __future__ import annotations


class AirFetchError(RuntimeError):
    """Base for every failure the core reports. `exit_code` is what the CLI returns."""
    exit_code = 1


class MalformedIdentifier(AirFetchError):
    exit_code = 2

    def __init__(self, urn: str, reason: str):
        self.urn = urn
        self.reason = reason
        super().__init__(f"Invalid URN {urn!r}: {reason}")


class RegistryUnreachable(AirFetchError):
    exit_code = 3


class RegistryError(AirFetchError):
    exit_code = 4

    def __init__(self, status: int, url: str = ""):
        self.status = status
        self.url = url
        super().__init__(f"Registry returned HTTP {status}" + (f" for {url}" if url else ""))


class MalformedResponse(AirFetchError):
    exit_code = 5


class VersionNotFound(AirFetchError):
    exit_code = 6

    def __init__(self, model_id: int, version_id: int):
        self.model_id = model_id
        self.version_id = version_id
        super().__init__(f"Version {version_id} not found for model {model_id}")


class NoFilesAvailable(AirFetchError):
    exit_code = 7


class LocalIOError(AirFetchError):
    exit_code = 8


class TransportError(AirFetchError):
    exit_code = 9


class DownloadFailed(AirFetchError):
    exit_code = 10

    def __init__(self, status: int, url: str = ""):
        self.status = status
        self.url = url
        super().__init__(f"Download failed with HTTP {status}" + (f" for {url}" if url else ""))


class UnknownSize(AirFetchError):
    exit_code = 11


class IntegrityMismatch(AirFetchError):
    exit_code = 12

    def __init__(self, path, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"Checksum mismatch for {path}: expected {expected}, got {actual}")


class SidecarInvalid(AirFetchError):
    exit_code = 13


class ConfigError(AirFetchError):
    exit_code = 14


class SidecarMismatch(AirFetchError):
    exit_code = 15
