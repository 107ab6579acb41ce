import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, TypeVar

from api_gen.binder import EndpointBinding
from api_gen.errors import PartialProvisioningFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def dispatch_endpoints(
    bindings: Sequence[EndpointBinding],
    provision: Callable[[EndpointBinding], T],
    max_workers: Optional[int] = None,
) -> List[T]:
    """Submit ``provision`` for every endpoint, then join them all.

    Every endpoint is submitted before any result is awaited. Results come
    back in endpoint order. If any endpoint failed, PartialProvisioningFailure
    lists all of them; the others still ran to completion.
    """
    if not bindings:
        return []

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="endpoint") as executor:
        futures = [executor.submit(provision, binding) for binding in bindings]
        wait(futures)

    results = []
    failures = {}
    for binding, future in zip(bindings, futures):
        error = future.exception()
        if error is not None:
            logger.error("endpoint %s failed: %s", binding.name, error)
            failures[binding.name] = error
        else:
            results.append(future.result())

    if failures:
        raise PartialProvisioningFailure(failures) from next(iter(failures.values()))
    return results
