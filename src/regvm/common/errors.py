class RegvmError(Exception):
    message: str
    line: int | None

    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message

        return f'line {self.line}: {self.message}'


class ParseError(RegvmError):
    ''' Static error, raised before execution starts '''
    pass


class ExecutionError(RegvmError, RuntimeError):
    ''' Fatal error during execution '''
    pass
