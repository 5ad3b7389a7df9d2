"""Errors shared by the engine, the metric registry and the platform registry."""


class ConfigurationError(ValueError):
    """Raised when a rating set, folder layout, template, metric or platform is misconfigured.

    The message always names the offending field, file or template.
    """
    pass
