from .local_mirror import BlobStore, FileBlobStore, LocalMirror, StorageUnavailableError
