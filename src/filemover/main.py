#!/usr/bin/env python3
"""
filemover - Move files between directories with integrity verification.

Copies every file from a source directory into a destination directory,
verifies each copy byte-for-byte, renames on name collisions and deletes
the source file once it has been copied.

Architecture:
- One linear workflow: validate directories, list files, copy/verify/delete
- Logger is injected into the engine, configured once by the CLI
- Expected problems are logged as warnings, I/O failures abort the run
"""

import argparse
import contextlib
import logging
import os
import secrets
import shutil
import sys
import traceback
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .logging_setup import DEFAULT_LOG_FILE, setup_logging, shutdown_logging

# Constants
BUFFER_SIZE = 8 * 1024 * 1024  # 8MB
SUFFIX_SPACE = 10000  # Random collision suffix is drawn from [0, SUFFIX_SPACE)
MAX_COLLISION_ATTEMPTS = 1000


# ============================================================================
# Errors
# ============================================================================


class FileMoverError(Exception):
    """Base error for filemover."""


class CollisionResolutionExhausted(FileMoverError):
    """No free destination file name could be found."""


class UsageError(FileMoverError):
    """Command line could not be parsed."""


# ============================================================================
# Data Models
# ============================================================================


@dataclass(frozen=True)
class TransferConfig:
    """
    Run configuration, created once at startup.

    Attributes
    ----------
    source_directory : str
        Directory whose files are moved
    destination_directory : str
        Directory receiving the files
    verify_on_copy : bool, default=True
        Compare source and destination contents after each copy
    delete_on_copy : bool, default=True
        Delete the source file after each copy
    """

    source_directory: str
    destination_directory: str
    verify_on_copy: bool = True
    delete_on_copy: bool = True


class TransferOutcome(Enum):
    """
    Outcome of a single file transfer.

    Attributes
    ----------
    COPIED : str
        Copied (and verified/deleted where enabled) without problems
    COPIED_VERIFY_MISMATCH : str
        Copied, but destination contents differ from the source
    COPIED_DELETE_FAILED : str
        Copied, but the source file is still present after deletion
    SKIPPED : str
        Source file disappeared between listing and processing
    """

    COPIED = "copied"
    COPIED_VERIFY_MISMATCH = "copied_verify_mismatch"
    COPIED_DELETE_FAILED = "copied_delete_failed"
    SKIPPED = "skipped"


@dataclass
class TransferResult:
    """
    Result for a single source file.

    Attributes
    ----------
    source : Path
        Source file path
    outcome : TransferOutcome
        What happened to the file
    destination : Path | None, default=None
        Path the file was copied to
    verified : bool | None, default=None
        Verification result, None when verification did not run
    deleted : bool | None, default=None
        Whether the source is gone, None when deletion did not run
    """

    source: Path
    outcome: TransferOutcome
    destination: Path | None = None
    verified: bool | None = None
    deleted: bool | None = None

    @property
    def success(self) -> bool:
        """
        Check if the file was moved without any warning.

        Returns
        -------
        bool
            True if the outcome is COPIED, False otherwise
        """
        return self.outcome == TransferOutcome.COPIED


# ============================================================================
# Transfer Engine
# ============================================================================


class TransferEngine:
    """
    Moves all files of the source directory into the destination directory.

    Parameters
    ----------
    config : TransferConfig
        Run configuration
    logger : logging.Logger | None, default=None
        Logger to report to (module logger if None)
    """

    def __init__(
        self,
        config: TransferConfig,
        logger: logging.Logger | None = None,
    ):
        self.config = config
        self.logger = logger if logger else logging.getLogger(__name__)
        self.source_directory = Path(config.source_directory)
        self.destination_directory = Path(config.destination_directory)

    def run(self) -> list[TransferResult]:
        """
        Execute the whole move.

        Returns
        -------
        list[TransferResult]
            One result per processed file, empty if validation failed

        Raises
        ------
        OSError
            If any copy, read or delete fails (after logging it)
        CollisionResolutionExhausted
            If no free destination name is found for a file
        """
        self.logger.info("==============Starting File Move===========")
        results: list[TransferResult] = []

        try:
            # Destination is not inspected when the source is invalid
            if self.validate_source() and self.validate_destination():
                for source_file in self.enumerate_files():
                    results.append(self.transfer_file(source_file))

                moved = sum(1 for r in results if r.outcome != TransferOutcome.SKIPPED)
                self.logger.info(f"Moved {moved} of {len(results)} file(s)")
        except Exception:
            self.logger.exception("Failed to move files")
            raise

        self.logger.info("==============Ending File Move===========")
        return results

    # ------------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------------

    def validate_source(self) -> bool:
        """
        Check that the source directory is given and exists.

        Returns
        -------
        bool
            True if the source directory can be used
        """
        return self._validate_directory(self.config.source_directory, "Source")

    def validate_destination(self) -> bool:
        """
        Check that the destination directory is given and exists.

        Returns
        -------
        bool
            True if the destination directory can be used
        """
        return self._validate_directory(
            self.config.destination_directory, "Destination"
        )

    def _validate_directory(self, directory: str, label: str) -> bool:
        self.logger.info(f"Verifying {label.lower()} directory: {directory}")
        if not directory or not directory.strip():
            self.logger.warning(f"{label} directory required!!!")
            return False
        if not Path(directory).is_dir():
            self.logger.warning(f"Unable to find {label.lower()} directory")
            return False
        return True

    # ------------------------------------------------------------------------
    # File discovery
    # ------------------------------------------------------------------------

    def enumerate_files(self) -> list[Path]:
        """
        List regular files directly inside the source directory.

        Returns
        -------
        list[Path]
            Source files sorted by name; subdirectories are not traversed
        """
        self.logger.info(
            f"Getting files from source directory: {self.source_directory}"
        )
        with os.scandir(self.source_directory) as entries:
            files = sorted(Path(entry.path) for entry in entries if entry.is_file())
        self.logger.info(f"Found {len(files)} file(s) in the source directory")
        return files

    # ------------------------------------------------------------------------
    # Per-file transfer
    # ------------------------------------------------------------------------

    def transfer_file(self, source_file: Path) -> TransferResult:
        """
        Copy, verify and delete a single source file.

        Verification is advisory: the source is deleted even when the
        contents do not match.

        Parameters
        ----------
        source_file : Path
            File to move

        Returns
        -------
        TransferResult
            Outcome for this file
        """
        if not source_file.is_file():
            self.logger.warning(f"Source file {source_file} no longer exists, skipping")
            return TransferResult(source=source_file, outcome=TransferOutcome.SKIPPED)

        destination = self.place_file(source_file)
        result = TransferResult(
            source=source_file,
            outcome=TransferOutcome.COPIED,
            destination=destination,
        )

        if self.config.verify_on_copy:
            result.verified = self.verify_file(source_file, destination)

        if self.config.delete_on_copy:
            result.deleted = self.delete_source_file(source_file)

        if result.verified is False:
            result.outcome = TransferOutcome.COPIED_VERIFY_MISMATCH
        elif result.deleted is False:
            result.outcome = TransferOutcome.COPIED_DELETE_FAILED
        return result

    def resolve_destination_path(self, source_file: Path) -> Path:
        """
        Find a destination path that does not exist yet.

        The plain file name is tried first, then ``<stem>_<n><suffix>`` with a
        random ``n`` below SUFFIX_SPACE.

        Parameters
        ----------
        source_file : Path
            Source file to find a destination for

        Returns
        -------
        Path
            Free destination path

        Raises
        ------
        CollisionResolutionExhausted
            If MAX_COLLISION_ATTEMPTS random names are all taken
        """
        candidate = self.destination_directory / source_file.name
        attempts = 0

        # lexists so that broken symlinks count as taken
        while os.path.lexists(candidate):
            self.logger.info(f"Destination file name {candidate} exists")
            if attempts >= MAX_COLLISION_ATTEMPTS:
                raise CollisionResolutionExhausted(
                    f"No free file name for {source_file.name} in "
                    f"{self.destination_directory} after {attempts} attempts"
                )
            attempts += 1
            number = secrets.randbelow(SUFFIX_SPACE)
            candidate = self.destination_directory / (
                f"{source_file.stem}_{number}{source_file.suffix}"
            )

        return candidate

    def place_file(self, source_file: Path) -> Path:
        """
        Resolve a destination and copy the source file there.

        If another file shows up at the resolved path before the copy
        starts, a new path is resolved.

        Parameters
        ----------
        source_file : Path
            File to copy

        Returns
        -------
        Path
            Path the file was copied to

        Raises
        ------
        CollisionResolutionExhausted
            If every resolved path was taken before it could be created
        """
        for _ in range(MAX_COLLISION_ATTEMPTS):
            destination = self.resolve_destination_path(source_file)
            self.logger.info(f"Copying file {source_file} to destination {destination}")
            try:
                self.copy_file(source_file, destination)
            except FileExistsError:
                self.logger.info(
                    f"Destination file {destination} was created by someone else"
                )
                continue
            return destination

        raise CollisionResolutionExhausted(
            f"Destination names for {source_file.name} kept being taken"
        )

    def copy_file(self, source: Path, destination: Path) -> None:
        """
        Copy file contents and metadata without overwriting.

        Parameters
        ----------
        source : Path
            Source file path
        destination : Path
            Destination file path, must not exist

        Raises
        ------
        FileExistsError
            If the destination already exists
        OSError
            If reading or writing fails; a partial destination is removed
        """
        with open(source, "rb") as f_source:
            # "x" fails atomically if the destination exists
            f_dest = open(destination, "xb")
            try:
                with f_dest:
                    shutil.copyfileobj(f_source, f_dest, BUFFER_SIZE)
                shutil.copystat(source, destination)
            except OSError:
                with contextlib.suppress(OSError):
                    destination.unlink()
                raise

    def verify_file(self, source: Path, destination: Path) -> bool:
        """
        Compare the full contents of source and destination.

        Parameters
        ----------
        source : Path
            Source file path
        destination : Path
            Copied file path

        Returns
        -------
        bool
            True if both files hold the same bytes
        """
        if not destination.exists():
            self.logger.warning(
                f"Could not find destination file: {destination} to compare"
            )
            return False

        if source.read_bytes() == destination.read_bytes():
            self.logger.info("File contents match.")
            return True

        self.logger.warning(f"File contents do not match: {source} -> {destination}")
        return False

    def delete_source_file(self, source: Path) -> bool:
        """
        Delete a source file and check that it is gone.

        Parameters
        ----------
        source : Path
            File to delete

        Returns
        -------
        bool
            True if the file no longer exists
        """
        source.unlink(missing_ok=True)
        if source.exists():
            self.logger.warning(f"Unable to delete source file. Path: {source}")
            return False

        self.logger.info("Source file deleted successfully")
        return True


# ============================================================================
# Main Entry Point
# ============================================================================


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser that raises UsageError instead of exiting with status 2."""

    def error(self, message: str):
        raise UsageError(message)


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv : list[str] | None, default=None
        Command line arguments (sys.argv[1:] if None)

    Returns
    -------
    int
        Exit code: 0 for success, 1 for failure, 130 for keyboard interrupt
    """
    parser = ArgumentParser(
        prog="filemover",
        description="Move files between directories with integrity verification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  filemover /incoming /archive                   # Move every file from /incoming to /archive
  filemover -v --log-file /var/log/mover.txt /a /b
        """,
    )

    # Collected loosely so a wrong count prints usage instead of an argparse error
    parser.add_argument(
        "directories",
        nargs="*",
        metavar="DIRECTORY",
        help="Source directory followed by destination directory",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=DEFAULT_LOG_FILE,
        help=f"Base name of the monthly log file (default: {DEFAULT_LOG_FILE})",
    )

    try:
        # Intermixed so options may sit between the two directories
        args = parser.parse_intermixed_args(argv)
    except UsageError as e:
        print(f"{e}")
        args = None

    if args is None or len(args.directories) != 2:
        print("Source and destination directory required!!!")
        parser.print_usage(sys.stdout)
        return 0

    source_directory, destination_directory = args.directories
    run_logger = setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        engine = TransferEngine(
            TransferConfig(
                source_directory=source_directory,
                destination_directory=destination_directory,
            ),
            logger=run_logger,
        )
        engine.run()

    except KeyboardInterrupt:
        print("\nOperation interrupted by user")
        return 130
    except Exception as e:
        print(f"{e}")
        traceback.print_exc(file=sys.stdout)
        return 1
    finally:
        shutdown_logging(run_logger)

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
