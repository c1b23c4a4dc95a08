"""
Runs the sharded join: derive shard keys, build one unit of work per shard, run the units (serially or on a
local process pool) and reduce their partial results into the per-read context
"""
import time
from collections import namedtuple
from concurrent import futures
from concurrent.futures.process import BrokenProcessPool

from .constants import DEFAULT_SHARD_WIDTH
from .context import check_complete, merge_partial_contexts, partial_contexts_from_reference, partial_contexts_from_variants
from .error import ReadContextError
from .group import group_by_shard
from .join import ReferenceWindow, cogroup, join_reference_shard, join_variant_shard
from .shard import key_by_reference_shard, key_by_variant_shard, validate_shard_width
from .util import logger

ShardJob = namedtuple('ShardJob', ['name', 'func', 'args'])
"""a unit of work: calling ``func(*args, **shared)`` returns the partial contexts of one shard"""

_SHARED = {}


def _init_worker(shared):
    _SHARED.clear()
    _SHARED.update(shared)


def _call_with_shared(func, args):
    return func(*args, **_SHARED)


def reference_shard_partial(shard, reads, reference_source=None, window=None):
    return partial_contexts_from_reference(join_reference_shard(shard, reads, reference_source, window=window))


def variant_shard_partial(shard, reads, variants, **kwargs):
    return partial_contexts_from_variants(join_variant_shard(shard, reads, variants))


class LocalShardRunner:
    """
    runs shard jobs locally. Jobs failing with anything other than a
    :class:`~readctx.error.ReadContextError` are resubmitted up to ``max_retries`` times. Jobs are pure so a
    rerun gives the same partial result. Any failure that is not retried cancels the rest of the run
    """

    def __init__(self, concurrency=1, max_retries=0, shared=None):
        """
        Args:
            concurrency (int): number of worker processes. 1 or less runs the jobs in the current process
            max_retries (int): number of times a job is resubmitted after an infrastructure failure
            shared (dict): keyword arguments passed to every job, sent once to each worker process
        """
        self.concurrency = concurrency
        self.max_retries = max_retries
        self.shared = {} if shared is None else shared
        self.pool = None
        self.generation = 0

    def _retryable(self, err, attempts):
        return not isinstance(err, ReadContextError) and attempts <= self.max_retries

    def run(self, jobs):
        """
        Returns:
            list: the result of every job, in no particular order
        """
        if self.concurrency is None or self.concurrency <= 1:
            return [self._run_serial(job) for job in jobs]
        return self._run_pool(jobs)

    def _run_serial(self, job):
        attempts = 0
        while True:
            attempts += 1
            try:
                return job.func(*job.args, **self.shared)
            except Exception as err:
                if not self._retryable(err, attempts):
                    raise
                logger.debug('retrying {} (attempt {}) after error: {}'.format(job.name, attempts, repr(err)))

    def _submit(self, job):
        if self.pool is None:
            self.generation += 1
            self.pool = futures.ProcessPoolExecutor(
                max_workers=self.concurrency, initializer=_init_worker, initargs=(self.shared,)
            )
        try:
            return self.pool.submit(_call_with_shared, job.func, job.args)
        except BrokenProcessPool:
            # the pool broke before any of its pending futures reported it
            self.pool.shutdown(wait=False)
            self.pool = None
            return self._submit(job)

    def _run_pool(self, jobs):
        results = []
        attempts = {}
        pending = {}
        try:
            for job in jobs:
                attempts[job.name] = 1
                future = self._submit(job)
                pending[future] = (job, self.generation)
            while pending:
                done, _ = futures.wait(list(pending), return_when=futures.FIRST_COMPLETED)
                for response in done:
                    job, generation = pending.pop(response)
                    err = response.exception()
                    if err is None:
                        results.append(response.result())
                        continue
                    if not self._retryable(err, attempts[job.name]):
                        raise err
                    attempts[job.name] += 1
                    logger.debug('retrying {} (attempt {}) after error: {}'.format(job.name, attempts[job.name], repr(err)))
                    # every future of a broken pool fails, only replace the pool once
                    if isinstance(err, BrokenProcessPool) and generation == self.generation and self.pool is not None:
                        self.pool.shutdown(wait=False)
                        self.pool = None
                    future = self._submit(job)
                    pending[future] = (job, self.generation)
        except BaseException:
            for response in pending:
                response.cancel()
            raise
        finally:
            self.close()
        return results

    def close(self):
        if self.pool is not None:
            self.pool.shutdown()
            self.pool = None


def build_shard_jobs(reads, variants, shard_width=DEFAULT_SHARD_WIDTH):
    """
    one job per reference shard group of reads and one per variant shard holding both reads and variants
    """
    jobs = []
    for shard, group in group_by_shard(key_by_reference_shard(reads, shard_width)).items():
        jobs.append(ShardJob('reference shard {}'.format(shard), reference_shard_partial, (shard, group)))
    reference_jobs = len(jobs)

    cogrouped = cogroup(key_by_variant_shard(reads, shard_width), key_by_variant_shard(variants, shard_width))
    for shard, (shard_reads, shard_variants) in cogrouped.items():
        if shard_reads and shard_variants:
            jobs.append(ShardJob('variant shard {}'.format(shard), variant_shard_partial, (shard, shard_reads, shard_variants)))
    logger.info('built {} reference shard jobs and {} variant shard jobs'.format(reference_jobs, len(jobs) - reference_jobs))
    return jobs


def run_pipeline(
    reads,
    variants,
    reference_source,
    shard_width=DEFAULT_SHARD_WIDTH,
    reference_window_padding=0,
    concurrency=1,
    max_retries=0,
):
    """
    pair every read with its reference bases and the variants overlapping it

    Args:
        reads (Iterable[ReadRecord]): the input reads, unique by identity
        variants (Iterable[Variant]): the input variants, unique by identity
        reference_source (ReferenceSource): source of the reference bases
        shard_width (int): bases per shard for both sharding schemes
        reference_window_padding (int): extra reference bases to include on either side of each read
        concurrency (int): number of worker processes, 1 runs everything in the current process
        max_retries (int): number of times a shard is rerun after an infrastructure failure

    Returns:
        Dict[str, ReadContextData]: the context by read identity, one per input read

    Raises:
        ReadContextError: the input is invalid or a read cannot be given its reference bases
    """
    start_time = time.time()
    shard_width = validate_shard_width(shard_width)
    reads = list(reads)
    variants = list(variants)
    for kind, records in [('read', reads), ('variant', variants)]:
        identities = {r.identity for r in records}
        if len(identities) != len(records):
            raise ReadContextError('{} identities must be unique'.format(kind), len(records) - len(identities))
    logger.info('joining {} reads and {} variants (shard width: {})'.format(len(reads), len(variants), shard_width))

    window = ReferenceWindow(
        reference_window_padding, reference_source=reference_source if reference_window_padding else None
    )
    jobs = build_shard_jobs(reads, variants, shard_width)
    runner = LocalShardRunner(
        concurrency=concurrency,
        max_retries=max_retries,
        shared={'reference_source': reference_source, 'window': window},
    )
    partials = runner.run(jobs)
    contexts = check_complete(merge_partial_contexts(*partials), reads)
    logger.info('assembled the context for {} reads in {:.2f}s'.format(len(contexts), time.time() - start_time))
    return contexts
