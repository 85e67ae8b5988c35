class WpkgError(Exception):
    exit_code = 1


class BuildError(WpkgError):
    pass


class FileMissingError(BuildError):
    exit_code = 50


class InvalidStructureError(BuildError):
    exit_code = 40


class SpecFileError(BuildError):
    exit_code = 60


class MissingNameFieldError(BuildError):
    exit_code = 70


class NoBuildDelegateFoundError(BuildError):
    exit_code = 80


class DelegateCommandError(BuildError):
    exit_code = 90


class ContainerError(WpkgError):
    pass


class BadMagicError(ContainerError):
    exit_code = 30


class TruncatedMemberError(ContainerError):
    exit_code = 31


class DecodeError(ContainerError):
    exit_code = 32
