class RshipError(Exception):
    """Base class for every error rship raises on purpose."""


class ConfigurationError(RshipError):
    """Caller input is malformed or contradictory."""


class RecordFormatError(ConfigurationError):
    def __init__(self, path, reason):
        self.path = path
        self.msg = f"Invalid package record `{path}`: {reason}"
        super().__init__(self.msg)


class RCommandFailed(RshipError):
    def __init__(self, command, returncode, err, cwd=None):
        self.command = command
        self.returncode = returncode
        self.err = err
        self.msg = (
            f"R command failed with exit code {returncode}!"
            f"\nRan command: `{' '.join(command)}`"
            f"\ncwd: `{cwd}`"
            f"\nError message: {err}"
        )
        super().__init__(self.msg)
