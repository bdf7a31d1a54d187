"""Common tooling exceptions. Store them in this central place to
avoid circular imports
"""


class MultiarchFatalError(Exception):
    """A broad exception for errors which should end the run with a non-zero exit"""
    pass


class UpstreamUnavailable(MultiarchFatalError):
    """The upstream release index could not be fetched or held no versions"""
    pass


class RegistryError(MultiarchFatalError):
    """The registry answered a read with an unexpected HTTP status"""

    def __init__(self, status, tag=None, message=None):
        self.status = status
        self.tag = tag
        if message is None:
            message = 'Received unexpected http code from registry: {}'.format(status)
            if tag:
                message += ' (tag {})'.format(tag)
        super(RegistryError, self).__init__(message)


class TagNotFound(MultiarchFatalError):
    """A tag does not resolve to an image configuration digest"""

    def __init__(self, tag):
        self.tag = tag
        super(TagNotFound, self).__init__('Tag not found in registry: {}'.format(tag))


class ManifestAssemblyError(MultiarchFatalError):
    """A manifest list could not be assembled or pushed"""

    def __init__(self, tag, reason):
        self.tag = tag
        super(ManifestAssemblyError, self).__init__('Unable to publish manifest list {}: {}'.format(tag, reason))


class BuildError(MultiarchFatalError):
    """The external build or push step failed"""
    pass


class PushError(MultiarchFatalError):
    """An alias could not be pulled, tagged or pushed with docker"""

    def __init__(self, ref, reason):
        self.ref = ref
        super(PushError, self).__init__('Unable to update {}: {}'.format(ref, reason))
