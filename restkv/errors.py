import json
import sys


def error_and_exit(error_name: str, error_message: str):
    json.dump({"name": error_name, "message": error_message}, sys.stderr, indent="\t")
    sys.exit(100)


class RestKvError(Exception):
    name = "RESTKV_ERROR"


class ArgumentParseError(RestKvError):
    name = "ARGUMENT_PARSE_ERROR"


class JsonFragmentError(RestKvError):
    name = "JSON_FRAGMENT_ERROR"


class FileAccessError(RestKvError):
    name = "FILE_ACCESS_ERROR"


class MultipleRawBodyFilesError(RestKvError):
    name = "MULTIPLE_RAW_BODY_FILES_ERROR"


class TransportError(RestKvError):
    name = "TRANSPORT_ERROR"


class ConfigError(RestKvError):
    name = "CONFIG_ERROR"


class UsageError(RestKvError):
    name = "USAGE_ERROR"


class UpstreamError(RestKvError):
    """The server answered with a status of 400 or above.

    Not fatal: the response has already been rendered, only the exit code
    reflects the failure.
    """

    name = "UPSTREAM_ERROR"

    def __init__(self, status_code: int, reason: str = ""):
        super().__init__(f"{status_code} {reason}".strip())
        self.status_code = status_code

    @property
    def exit_code(self) -> int:
        return self.status_code - 399
