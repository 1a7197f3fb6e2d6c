from __future__ import annotations


class KubeLogTailError(Exception):
    pass


class ConfigError(KubeLogTailError):
    pass


class InvalidModeError(ConfigError):
    pass


class InvalidSelectorError(ConfigError):
    pass


class ClientConstructionError(KubeLogTailError):
    pass


class ListError(KubeLogTailError):
    pass


class TailError(KubeLogTailError):
    def __init__(self, label: str, message: str):
        super().__init__(f"{message} for {label}")
        self.label = label


class StreamOpenError(TailError):
    def __init__(self, label: str, cause: BaseException | str):
        super().__init__(label, f"unable to stream logs: {cause}")
        self.cause = cause


class StreamReadError(TailError):
    def __init__(self, label: str, cause: BaseException | str):
        super().__init__(label, f"error scanning lines: {cause}")
        self.cause = cause
