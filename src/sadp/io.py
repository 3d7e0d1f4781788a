#!/usr/bin/env python3
"""Reading and writing contact maps and matchings as plain text.

Contact-map format: the first data line holds the node count, each
following line one contact as ``i<TAB>j[<TAB>weight[<TAB>1]]`` with
0-based node indices. Trailing columns are ignored. Blank lines and
lines starting with ``#`` are skipped.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from sadp import constants
from sadp.contact_map import ContactMap

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _data_lines(path: Path) -> Iterable[Tuple[int, str]]:
    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith(constants.COMMENT_PREFIX):
                continue
            yield line_num, line


def read_contact_map(
    path: PathLike, name: Optional[str] = None
) -> ContactMap:
    """Load a contact map from ``path``.

    Args:
        path: File in the contact-map text format.
        name: Name given to the map; defaults to the file stem.

    Returns:
        The parsed ContactMap.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is empty or a line cannot be parsed.
    """
    path = Path(path)
    name = name if name is not None else path.stem
    lines = _data_lines(path)

    try:
        line_num, header = next(lines)
    except StopIteration:
        raise ValueError(f"Contact map file {path} is empty") from None
    try:
        n_nodes = int(header.split()[0])
    except ValueError:
        raise ValueError(
            f"{path}:{line_num}: expected node count, got '{header}'"
        ) from None
    if n_nodes < 0:
        raise ValueError(f"{path}:{line_num}: negative node count {n_nodes}")

    edges = []
    for line_num, line in lines:
        parts = line.split()
        if len(parts) < 2:
            raise ValueError(
                f"{path}:{line_num}: expected 'i j [weight]', got '{line}'"
            )
        try:
            i, j = int(parts[0]), int(parts[1])
        except ValueError:
            raise ValueError(
                f"{path}:{line_num}: node indices must be integers, "
                f"got '{line}'"
            ) from None
        if i == j:
            LOGGER.warning(f"{path}:{line_num}: ignoring self-contact {i}")
            continue
        edges.append((i, j))

    try:
        contact_map = ContactMap.from_edges(n_nodes, edges, name=name)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
    LOGGER.info(
        f"Read contact map {name} from {path} "
        f"(nodes={contact_map.n_nodes}, edges={contact_map.n_edges})"
    )
    return contact_map


def write_contact_map(contact_map: ContactMap, path: PathLike) -> None:
    """Write ``contact_map`` to ``path`` in the contact-map text format."""
    path = Path(path)
    with open(path, "w") as f:
        f.write(f"{contact_map.n_nodes}\n")
        for i, j in contact_map.edges():
            f.write(f"{i}\t{j}\t1\t1\n")
    LOGGER.info(f"Wrote contact map {contact_map.name} to {path}")


def write_matching(matching: List[Tuple[int, int]], path: PathLike) -> None:
    """Write node pairs as a two-column TSV with a header row."""
    path = Path(path)
    with open(path, "w") as f:
        f.write("first\tsecond\n")
        for i, j in matching:
            f.write(f"{i}\t{j}\n")
    LOGGER.info(f"Wrote {len(matching)} matched pairs to {path}")
