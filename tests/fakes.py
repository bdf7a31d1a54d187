"""
In-memory stand-in for RegistryClient. Tags map to image digests; tag_and_push
copies the digest the way a real retag would.
"""
from multiarchlib.exceptions import RegistryError, TagNotFound


class FakeRegistry(object):

    def __init__(self, digests=None, published=None, namespace="jenkins", image="jenkins-experimental", dry_run=False):
        self.dry_run = dry_run
        self.pushed_images = []
        self.digests = dict(digests or {})
        self.published = set(published or [])
        self.namespace = namespace
        self.image = image
        self.errors = {}
        self.pushed = []

    def image_ref(self, tag, namespace=None):
        return "{}/{}:{}".format(namespace or self.namespace, self.image, tag)

    def is_published(self, tag):
        if tag in self.errors:
            raise RegistryError(self.errors[tag], tag)
        return tag in self.published or tag in self.digests

    def digest_of(self, tag):
        if tag in self.errors:
            raise RegistryError(self.errors[tag], tag)
        if tag not in self.digests:
            raise TagNotFound(tag)
        return self.digests[tag]

    def push(self, tag, namespace=None):
        if not self.dry_run:
            self.pushed_images.append(self.image_ref(tag, namespace))

    def tag_and_push(self, source_tag, target_namespace, target_tag):
        self.pushed.append((source_tag, target_namespace, target_tag))
        if source_tag in self.digests:
            self.digests[target_tag] = self.digests[source_tag]
