import logging


class EntityLoggingAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        return '[%s] %s' % (self.extra['entity'], msg), kwargs


def getLogger(module_name=None):
    """
    Returns a logger appropriate for use in the multiarch modules.
    Modules should request a logger using their __name__
    """
    logger_name = 'multiarch'

    if module_name:
        logger_name = '{}.{}'.format(logger_name, module_name)

    return logging.getLogger(logger_name)


def getEntityLogger(entity, module_name=None):
    """
    Returns a logger which prefixes every message with the given entity
    (usually an architecture specific tag like 2.301-arm64).
    """
    return EntityLoggingAdapter(getLogger(module_name), {'entity': entity})
