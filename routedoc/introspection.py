"""Recover documented routes from a live router tree.

The documentation generator does not keep its own route table. Instead it
asks a ``RouteSource`` for the leaves of whatever is registered, each leaf
being ``(method, path segments, RouteSchema or None)``. ``RouterSource`` is
the source for ``routedoc.router``: it walks the layer stacks depth-first and
rebuilds each path from the fragments the layers were mounted at.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Protocol, Tuple, Union

from .builder import RouteSchema
from .models import HTTPMethod
from .router import Layer, Router

logger = logging.getLogger(__name__)

Leaf = Tuple[Optional[HTTPMethod], List[str], Optional[RouteSchema]]

# A compiled path is literal when, between the leading ^ and trailing $, it
# only holds escaped characters, plain characters and {param} groups.
_LITERAL_PATH = re.compile(
    r"^\^((?:\\.|\(\?P<\w+>\[\^/\]\+\?\)|[^.*+?^${}()|[\]\\])*)\$$"
)
_PARAM_GROUP = re.compile(r"\(\?P<(\w+)>\[\^/\]\+\?\)")
_ESCAPED = re.compile(r"\\(.)")
_BOUNDARY_SUFFIXES = ("/?(?=/|$)", "/?$")


@dataclass(frozen=True)
class RouteInfo:
    """One documented (method, path) pair."""

    method: HTTPMethod
    path: str
    schema: RouteSchema


class RouteSource(Protocol):
    """Anything that can enumerate registered route leaves."""

    def walk(self) -> Iterator[Leaf]:
        ...


def split_fragment(fragment: Any) -> List[str]:
    """Turn the fragment a layer is mounted at into path segments.

    Plain strings are split on ``/``. Compiled patterns produced by
    ``compile_path`` are decomposed back into literal segments, with named
    groups rendered as ``{name}``. Any other pattern is kept whole as a
    single ``<complex:...>`` segment.
    """
    if isinstance(fragment, Layer):
        if fragment.fast_slash or fragment.regexp is None:
            return []
        fragment = fragment.regexp
    if isinstance(fragment, str):
        return fragment.split("/")
    if not isinstance(fragment, re.Pattern):
        return []

    source = fragment.pattern
    for suffix in _BOUNDARY_SUFFIXES:
        if source.endswith(suffix):
            source = source[: -len(suffix)] + "$"
            break

    literal = _LITERAL_PATH.match(source)
    if literal is None:
        return [f"<complex:{fragment.pattern}>"]
    body = _PARAM_GROUP.sub(r"{\1}", literal.group(1))
    return _ESCAPED.sub(r"\1", body).split("/")


def join_segments(segments: List[str]) -> str:
    """Join segments with ``/``, dropping empty ones."""
    return "/".join(segment for segment in segments if segment)


class RouterSource:
    """Walks a ``Router`` tree depth-first in registration order."""

    def __init__(self, router: Router):
        self.router = router

    def walk(self) -> Iterator[Leaf]:
        # Frames of (remaining layers, accumulated segments, routers on the descent chain)
        frames = [(iter(self.router.stack), [], (id(self.router),))]
        while frames:
            layers, prefix, ancestors = frames[-1]
            layer = next(layers, None)
            if layer is None:
                frames.pop()
                continue

            if layer.route is not None:
                segments = prefix + split_fragment(layer.route.path)
                for handler_layer in layer.route.stack:
                    if handler_layer.method is not None:
                        yield handler_layer.method, segments, handler_layer.schema
            elif isinstance(layer.handle, Router):
                if id(layer.handle) in ancestors:
                    logger.warning(f"Skipping router mounted inside itself at {layer.path!r}")
                    continue
                frames.append(
                    (
                        iter(layer.handle.stack),
                        prefix + split_fragment(layer),
                        ancestors + (id(layer.handle),),
                    )
                )


def list_routes(source: Union[Router, RouteSource]) -> List[RouteInfo]:
    """List every registered route that carries a RouteSchema.

    The order of the result is not meaningful.
    """
    if isinstance(source, Router):
        source = RouterSource(source)

    routes = []
    for method, segments, schema in source.walk():
        if method is None or schema is None:
            continue
        routes.append(RouteInfo(method=method, path=join_segments(segments), schema=schema))
    logger.debug(f"Discovered {len(routes)} documented routes")
    return routes
