"""Exception hierarchy shared by all slidecast stages."""


class SlidecastError(Exception):
    """Base class for errors that abort a stage run."""

    pass


class MissingPreconditionError(SlidecastError):
    """A stage was started before the work it depends on exists."""

    pass


class ExternalToolError(SlidecastError):
    """An external process or API call failed."""

    pass


class CorruptStateError(SlidecastError):
    """The checkpoint file exists but cannot be parsed."""

    pass


class ProbeError(SlidecastError):
    """The media probe returned no usable duration."""

    pass


class ArtifactError(SlidecastError):
    """A generated artifact exists on disk but cannot be read."""

    pass


class ConfigError(SlidecastError):
    """An environment setting has a value of the wrong type."""

    pass
