"""Top-level module for message generation."""

from __future__ import annotations

import argparse
import glob
import logging
import os.path
import subprocess
import tempfile
from pathlib import Path

from base_message_generator import capnp_loader, source_parser
from base_message_generator.declaration import DeclarationModule
from base_message_generator.helper import CAPNP_SUFFIX, GENERATED_SUFFIX, PY_SUFFIX, replace_declaration_suffix
from base_message_generator.writer import Writer

logger = logging.getLogger(__name__)

# File names that are picked up when a directory is given as a search path.
DECLARATION_FILE_SUFFIXES = (CAPNP_SUFFIX, f"_messages{PY_SUFFIX}")

# Line length for formatting generated modules.
LINE_LENGTH = 120


class PyrightValidationError(Exception):
    """Raised when pyright validation finds type errors in generated modules."""

    pass


def load_module(path: str, import_paths: list[str] | None = None) -> DeclarationModule:
    """Parse a declaration file with the front-end that matches its extension.

    Args:
        path (str): A *.capnp schema or a Python declaration file.
        import_paths (list[str] | None, optional): Additional import paths for capnp schemas.

    Raises:
        MalformedDeclarationError: If the file cannot be parsed.

    Returns:
        DeclarationModule: The declarations of the file.
    """
    if path.endswith(CAPNP_SUFFIX):
        return capnp_loader.load_declarations(path, import_paths)

    return source_parser.load_declarations(path)


def _count_pyright_errors(output: str) -> int:
    return sum(1 for line in output.splitlines() if " - error:" in line)


def validate_with_pyright(generated_files: list[str]) -> None:
    """Type check the written message modules with pyright.

    The modules import `base_message_generator.messages`, so pyright has to be able to resolve this package.

    Args:
        generated_files (list[str]): Paths of the written `*_derived.py` modules.

    Raises:
        PyrightValidationError: If pyright is missing, cannot run, or reports errors.
    """
    if not generated_files:
        logger.warning("Nothing was generated, skipping pyright.")
        return

    logger.info("Type checking %d generated module(s) with pyright.", len(generated_files))

    try:
        result = subprocess.run(["pyright", *generated_files], capture_output=True, text=True, check=False)
    except FileNotFoundError as e:
        raise PyrightValidationError("pyright command not found. Install the test extra or pass --no-pyright.") from e
    except subprocess.SubprocessError as e:
        raise PyrightValidationError(f"Error running pyright: {e}") from e

    error_count = _count_pyright_errors(result.stdout)
    if error_count or result.returncode != 0:
        message = f"Pyright validation failed with {error_count} error(s) in generated modules:\n\n{result.stdout}"
        logger.error(message)
        raise PyrightValidationError(message)

    logger.info("Generated modules passed pyright.")


def format_module(source: str) -> str:
    """Sort the imports of a generated module and format it with ruff.

    The writer emits its own imports ahead of the ones carried over from the declaration file, and puts every
    constructor argument on its own line. Ruff brings both into the usual shape.

    Args:
        source (str): The module text from `Writer.dumps`.

    Returns:
        str: The formatted module, or `source` unchanged if ruff cannot run.
    """
    with tempfile.TemporaryDirectory() as directory:
        module_path = Path(directory) / f"module{PY_SUFFIX}"
        module_path.write_text(source, encoding="utf-8")

        try:
            subprocess.run(
                ["ruff", "check", "--fix", "--select", "I", str(module_path)], capture_output=True, check=False
            )
            subprocess.run(
                ["ruff", "format", "--line-length", str(LINE_LENGTH), str(module_path)], capture_output=True, check=True
            )
        except subprocess.CalledProcessError as e:
            logger.error("ruff could not format a generated module: %s", e.stderr.decode("utf-8", errors="replace"))
            return source
        except OSError as e:
            logger.error(f"Could not run ruff: {e}")
            return source

        return module_path.read_text(encoding="utf-8")


def generate_module(writer: Writer, output_file_path: str) -> None:
    """Format the module of a writer and write it to `<output_file_path>.py`.

    Args:
        writer (Writer): A writer whose classes are already generated.
        output_file_path (str): The output path, without file extension.
    """
    with open(output_file_path + PY_SUFFIX, "w", encoding="utf8") as output_file:
        output_file.write(format_module(writer.dumps()))

    logger.info("Wrote %d message type(s) to '%s%s'.", len(writer.type_names), output_file_path, PY_SUFFIX)


def _is_glob(part: str) -> bool:
    return any(c in part for c in "*?[")


def extract_base_from_pattern(pattern: str) -> str:
    """The leading directories of a search pattern, up to its first glob component.

    A pattern that names a declaration file yields the directory of that file. A pattern that starts with a glob
    component yields an empty string. E.g. both `declarations/**/*.capnp` and `declarations/chat_messages.py`
    yield `declarations`.

    Args:
        pattern (str): A search path or glob expression, as given with `--paths`.

    Returns:
        str: The base directory of the pattern.
    """
    literal_parts: list[str] = []
    for part in pattern.split(os.sep):
        if _is_glob(part):
            break
        literal_parts.append(part)
    else:
        if os.path.splitext(pattern)[1] in (CAPNP_SUFFIX, PY_SUFFIX):
            literal_parts = literal_parts[:-1]

    return os.sep.join(literal_parts)


def _determine_common_base(paths: list[str], valid_paths: list[str], root_directory: str) -> str | None:
    """Determine the directory, relative to which the layout of the inputs is preserved in the output directory.

    Args:
        paths: The search patterns.
        valid_paths: The declaration files that were found.
        root_directory: The root directory for resolving relative patterns.

    Returns:
        The common base directory, or None if there are no inputs.
    """
    absolute_bases = []
    for pattern in paths:
        base = extract_base_from_pattern(pattern)
        if base:
            absolute_bases.append(os.path.abspath(os.path.join(root_directory, base)))

    if absolute_bases:
        return os.path.commonpath(absolute_bases)

    if not valid_paths:
        return None

    return os.path.commonpath([os.path.dirname(os.path.abspath(p)) for p in valid_paths])


def _find_declaration_files(directory: str, recursive: bool) -> set[str]:
    found: set[str] = set()

    if recursive:
        for root, _, files in os.walk(directory):
            for file in files:
                if file.endswith(DECLARATION_FILE_SUFFIXES):
                    found.add(os.path.join(root, file))
    else:
        for file in os.listdir(directory):
            file_path = os.path.join(directory, file)
            if os.path.isfile(file_path) and file.endswith(DECLARATION_FILE_SUFFIXES):
                found.add(file_path)

    return found


def run(args: argparse.Namespace, root_directory: str):
    """Run the generator on a set of paths that point to declaration files.

    Every file is parsed and every declaration derived before anything is written, so that a single
    failing declaration leaves no partial output behind.

    Args:
        args (argparse.Namespace): The arguments that were passed when calling the generator.
        root_directory (str): The directory, from which the generator is executed.

    Raises:
        DerivationError: If a declaration cannot be parsed or derived.
        PyrightValidationError: If the generated modules do not pass pyright.
    """
    paths: list[str] = args.paths
    excludes: list[str] = args.excludes
    clean: list[str] = args.clean
    output_dir: str = getattr(args, "output_dir", "")
    import_paths: list[str] = getattr(args, "import_paths", [])
    skip_pyright: bool = getattr(args, "skip_pyright", False)

    cleanup_paths: set[str] = set()
    for c in clean:
        cleanup_directory = os.path.join(root_directory, c)
        cleanup_paths = cleanup_paths.union(glob.glob(cleanup_directory, recursive=args.recursive))

    for cleanup_path in cleanup_paths:
        logger.debug(f"Removing {cleanup_path}")
        os.remove(cleanup_path)

    excluded_paths: set[str] = set()
    for exclude in excludes:
        exclude_path = os.path.join(root_directory, exclude)
        if os.path.isfile(exclude_path):
            excluded_paths.add(exclude_path)
        else:
            excluded_paths = excluded_paths.union(glob.glob(exclude_path, recursive=args.recursive))

    search_paths: set[str] = set()
    for path in paths:
        search_path = os.path.join(root_directory, path)

        if os.path.isdir(search_path):
            search_paths = search_paths.union(_find_declaration_files(search_path, args.recursive))
        else:
            search_paths = search_paths.union(glob.glob(search_path, recursive=args.recursive))

    # Outputs of earlier runs are never inputs
    valid_paths = sorted(
        p for p in search_paths - excluded_paths if not os.path.splitext(p)[0].endswith(GENERATED_SUFFIX)
    )

    if not valid_paths:
        logger.warning("No declaration files found.")
        return

    absolute_import_paths = [os.path.join(root_directory, p) for p in import_paths]

    writers: list[tuple[str, Writer]] = []
    for path in valid_paths:
        logger.info(f"Reading declarations from {path}")
        writer = Writer(load_module(path, absolute_import_paths))
        writer.generate_all()

        if not writer.type_names:
            logger.info(f"No message declarations in {path}, skipping.")
            continue

        writers.append((path, writer))

    common_base = _determine_common_base(paths, valid_paths, root_directory) if output_dir else None

    output_directories_used: set[str] = set()
    generated_files: list[str] = []

    for path, writer in writers:
        if output_dir:
            output_directory = output_dir
            if common_base:
                rel_dir = os.path.dirname(os.path.relpath(os.path.abspath(path), common_base))
                output_directory = os.path.join(output_dir, rel_dir)

            os.makedirs(output_directory, exist_ok=True)
        else:
            # No output_dir specified: place modules next to the declaration files
            output_directory = os.path.dirname(path)

        output_directories_used.add(output_directory)

        output_file_path = os.path.join(output_directory, replace_declaration_suffix(os.path.basename(path)))
        generate_module(writer, output_file_path)
        generated_files.append(output_file_path + PY_SUFFIX)

    # Create py.typed marker in each output directory to mark the package as typed (PEP 561)
    for output_directory in output_directories_used:
        py_typed_path = os.path.join(output_directory, "py.typed")
        if not os.path.exists(py_typed_path):
            with open(py_typed_path, "w", encoding="utf8") as f:
                f.write("")

    if not skip_pyright:
        validate_with_pyright(generated_files)
