"""
Batch signing of every APK in a directory.

Candidates are the entries directly inside the directory whose suffix is
exactly ``.apk``. Each one is handed to a signing collaborator on a thread
pool; the batch returns once every call has settled and fails if any of
them failed.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError, as_completed
from pathlib import Path
from typing import Dict, List, Optional, Union

from apksign.logger import get_logger
from apksign.utils.exceptions import (
    DirectoryAccessError,
    NoCandidatesError,
    SigningFailure,
    SigningTimeoutError,
)

logger = get_logger(__name__)

APK_EXTENSION = ".apk"
MAX_DEFAULT_WORKERS = 32


def _failure_cause(apk: Path, error: BaseException) -> Union[BaseException, str]:
    # A collaborator's own SigningFailure is unwrapped so failures never nest
    if isinstance(error, SigningFailure):
        return error.failures.get(apk, error)
    return error


def find_candidates(directory: Union[str, Path]) -> List[Path]:
    """
    List the APK files directly inside a directory.

    The extension match is case-sensitive, so ``app.APK`` is not a candidate.

    Args:
        directory: Directory to scan (not recursive)

    Returns:
        List[Path]: Absolute paths of the candidates, sorted by name

    Raises:
        DirectoryAccessError: If the directory is missing or unreadable
    """
    directory = Path(directory)

    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        raise DirectoryAccessError(f"APK directory does not exist: '{directory}'")
    except NotADirectoryError:
        raise DirectoryAccessError(f"APK directory is not a directory: '{directory}'")
    except OSError as e:
        raise DirectoryAccessError(f"Cannot read APK directory '{directory}': {e}") from e

    candidates = sorted(entry.absolute() for entry in entries if entry.suffix == APK_EXTENSION)
    logger.debug(f"Found {len(candidates)} APK(s) in {directory}")
    return candidates


def sign_all(
    directory: Union[str, Path],
    signer,
    max_workers: Optional[int] = None,
    timeout: Optional[float] = None
) -> List[Path]:
    """
    Sign every APK in a directory concurrently.

    Args:
        directory: Directory holding the APKs
        signer: Signing collaborator exposing ``sign(path)``; must accept
                concurrent calls for distinct files
        max_workers: Thread pool size (defaults to one thread per APK, capped)
        timeout: Optional deadline in seconds for the whole batch

    Returns:
        List[Path]: The signed APKs

    Raises:
        DirectoryAccessError: If the directory is missing or unreadable
        NoCandidatesError: If the directory holds no .apk files
        SigningFailure: If at least one APK failed to sign (lists all of them)
        SigningTimeoutError: If the batch did not settle before the deadline
    """
    directory = Path(directory)
    candidates = find_candidates(directory)
    if not candidates:
        raise NoCandidatesError(directory)

    workers = max_workers or min(len(candidates), MAX_DEFAULT_WORKERS)
    logger.info(f"Signing {len(candidates)} APK(s) from {directory} ({workers} worker(s))")

    failures: Dict[Path, Union[BaseException, str]] = {}
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="apksign")
    try:
        futures = {executor.submit(signer.sign, apk): apk for apk in candidates}

        try:
            for future in as_completed(futures, timeout=timeout):
                apk = futures[future]
                try:
                    future.result()
                except Exception as e:
                    failures[apk] = _failure_cause(apk, e)
                    logger.error(f"Failed to sign {apk.name}: {failures[apk]}")
                else:
                    logger.info(f"Signed {apk.name}")
        except FuturesTimeoutError:
            pending = [apk for future, apk in futures.items() if not future.done()]
            for future, apk in futures.items():
                if apk in pending:
                    failures[apk] = f"not finished within {timeout}s"
                elif apk not in failures and future.exception() is not None:
                    failures[apk] = _failure_cause(apk, future.exception())
            raise SigningTimeoutError(
                failures,
                f"Signing did not finish within {timeout}s; "
                f"still pending: {', '.join(apk.name for apk in pending)}",
            )
    finally:
        # Do not block on stragglers once the deadline has passed
        executor.shutdown(wait=timeout is None, cancel_futures=True)

    if failures:
        raise SigningFailure(failures)

    logger.info(f"All {len(candidates)} APK(s) signed")
    return candidates
