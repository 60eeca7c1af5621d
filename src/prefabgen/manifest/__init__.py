from .builder import BuildResult, ManifestBuilder, read_manifest, write_manifest

__all__ = ["BuildResult", "ManifestBuilder", "read_manifest", "write_manifest"]
