from pathlib import Path


def file_signature(path: Path) -> str:
    """
    Cheap change detector for the probe cache: '<size>-<mtime seconds>'.

    Content is never read; a file rewritten in place with the same size
    within the same second keeps its signature.
    """
    st = path.stat()
    return f"{st.st_size}-{int(st.st_mtime)}"
