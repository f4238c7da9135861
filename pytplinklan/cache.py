"""
Response cache for device polls.

Entries are keyed on the (namespace, command) pair of a request. The command
argument is NOT part of the key: "set brightness 10" and "set brightness 90"
share an entry, so any mutating call has to invalidate its namespace before it
is sent (see CachePolicy in client.py). Pass key_on_argument=True to key on the
argument as well.
"""
import copy
import json
import logging
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from .exceptions import TPLinkSerializationException


class Request(object):
    """
    A single command addressed to a device subsystem.

    Equality and hashing only look at namespace and command.
    """

    __slots__ = ('namespace', 'command', 'argument')

    def __init__(self, namespace: str, command: str, argument: Any = None) -> None:
        self.namespace = namespace
        self.command = command
        self.argument = argument

    def payload(self) -> Dict:
        """
        Build the wire object {namespace: {command: argument}}.

        Devices expect an object for commands without parameters, so a
        missing argument is sent as {}.
        """
        argument = {} if self.argument is None else self.argument
        return {self.namespace: {self.command: argument}}

    def __eq__(self, other):
        if not isinstance(other, Request):
            return NotImplemented
        return (self.namespace, self.command) == (other.namespace, other.command)

    def __hash__(self):
        return hash((self.namespace, self.command))

    def __repr__(self):
        return "<Request %s.%s %r>" % (self.namespace, self.command, self.argument)


class ResponseCache(object):
    """
    TTL cache of device replies.

    An entry is valid while ``clock() - inserted_at < ttl``. Reading an expired
    entry evicts it and counts as a miss. Hit/miss counters only ever grow.

    Not thread safe: each device handle owns its own cache.
    """

    def __init__(self,
                 ttl: float,
                 clock: Callable[[], float] = time.monotonic,
                 key_on_argument: bool = False,
                 logger: logging.Logger = None) -> None:
        self._ttl = ttl
        self._clock = clock
        self._key_on_argument = key_on_argument
        self._store = {}  # type: Dict[Hashable, Tuple[float, Request, Any]]
        self._hits = 0
        self._misses = 0

        if logger is None:
            self.logger = logging.getLogger(__name__)
        else:
            self.logger = logger

    def _key(self, request: Request) -> Hashable:

        if self._key_on_argument:
            # None goes on the wire as {}, so it must share the {} key
            argument = {} if request.argument is None else request.argument

            try:
                rendered = json.dumps(argument, sort_keys=True, separators=(',', ':'))
            except (TypeError, ValueError) as ex:
                raise TPLinkSerializationException(
                    "Could not serialise argument of %r: %s" % (request, ex)) from ex

            return (request.namespace, request.command, rendered)

        return request

    def _lookup(self, request: Request) -> Tuple[bool, Any]:
        key = self._key(request)
        entry = self._store.get(key)

        if entry is None:
            self._misses += 1
            return False, None

        inserted_at, _, value = entry

        if self._clock() - inserted_at >= self._ttl:
            self.logger.debug('Cache entry for %r expired, evicting', request)
            del self._store[key]
            self._misses += 1
            return False, None

        self._hits += 1
        return True, copy.deepcopy(value)

    def get(self, request: Request) -> Optional[Any]:
        """
        Look up a cached reply.

        :param request: request whose reply is wanted
        :return: a copy of the cached value, or None on a miss
        """
        return self._lookup(request)[1]

    def insert(self, request: Request, value: Any) -> None:
        self._store[self._key(request)] = (self._clock(), request, copy.deepcopy(value))

    def get_or_insert_with(self, request: Request, producer: Callable[[Request], Any]) -> Any:
        """
        Return the cached reply, or call producer(request) and cache its result.

        Exceptions raised by the producer propagate and nothing is cached.
        """
        found, value = self._lookup(request)

        if found:
            self.logger.debug('Cache hit for %r', request)
            return value

        self.logger.debug('Cache miss for %r', request)
        value = producer(request)
        self.insert(request, value)
        return value

    def retain(self, predicate: Callable[[Request, Any], bool]) -> None:
        """Drop every entry for which predicate(request, value) is false."""
        for key, (_, request, value) in list(self._store.items()):
            if not predicate(request, value):
                del self._store[key]

    def invalidate_namespace(self, namespace: str) -> None:
        self.logger.debug('Invalidating cached %s replies', namespace)
        self.retain(lambda request, _: request.namespace != namespace)

    def remove(self, request: Request) -> Optional[Any]:
        entry = self._store.pop(self._key(request), None)
        return None if entry is None else entry[2]

    def clear(self) -> None:
        self.logger.debug('Clearing response cache')
        self._store.clear()

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def __len__(self):
        return len(self._store)

    def __contains__(self, request):
        return self._key(request) in self._store

    def __repr__(self):
        return "<%s ttl=%s hits=%i misses=%i entries=%i>" % (
            self.__class__.__name__, self._ttl, self._hits, self._misses, len(self._store))
