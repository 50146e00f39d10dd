"""
Core download engine.

This package contains the concurrency and ordering logic. The `HlsDownloader`
coordinates a download call, delegating segment fan-out to the
`SegmentScheduler`, ordered writes to the `OrderedAssembler` and the final
verdict to the `FailurePolicy`.
"""
