class BuzzError(Exception):
    """Base class for failures that end a command with a printed message."""

    exit_code = 1


class InvalidArgument(BuzzError):
    pass


class FileNotFound(BuzzError):
    def __init__(self, path: str) -> None:
        super().__init__(f"file does not exist: {path}")
        self.path = path


class MissingCredential(BuzzError):
    def __init__(self, config_path: str, prog: str = "buzzheavier") -> None:
        super().__init__(
            f"No token provided and none found in {config_path}. Please run:\n"
            f"  {prog} set-token <your_token>"
        )
        self.config_path = config_path


class UnknownCommand(BuzzError):
    def __init__(self, command: str) -> None:
        super().__init__(f"Unknown command: {command}")
        self.command = command
