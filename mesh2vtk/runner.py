"""
mesh2vtk Conversion Runner Module

This module wires the conversion pipeline together and provides the command
line entry point:

    meshtal file -> Mesh -> group selection -> scaling -> geometry
                 -> datasets -> VTK files
"""

from __future__ import annotations

import argparse
import contextlib
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from . import config
from .core import constants
from .core.assembly import assemble_datasets
from .core.data_classes import Geometry, Mesh
from .core.errors import Mesh2VtkError
from .core.geometry import build_geometry, validate_resolution
from .core.meshtal import read_meshtal
from .core.output import ByteOrder, Compressor, OutputDispatcher, VtkFormat, WriterConfig
from .core.scaling import ValueScaler
from .core.selection import GroupFilter, resolve_selection


@dataclass
class ConversionOptions:
    """Per-invocation choices, validated on construction.

    Invalid scale factors and resolutions are rejected here, before any file
    is read or any geometry is built.
    """

    energy: GroupFilter = field(default_factory=GroupFilter.everything)
    time: GroupFilter = field(default_factory=GroupFilter.everything)
    scale: float = config.DEFAULT_SCALE
    include_errors: bool = True
    resolution: int = config.DEFAULT_RESOLUTION
    output: str = config.DEFAULT_OUTPUT_NAME
    writer_config: WriterConfig = field(default_factory=lambda: WriterConfig.from_names(
        config.DEFAULT_VTK_FORMAT, config.DEFAULT_BYTE_ORDER, config.DEFAULT_COMPRESSOR,
    ))
    plot_path: Optional[str] = None
    progress: bool = True
    scaler: ValueScaler = field(init=False, repr=False)

    def __post_init__(self):
        self.scaler = ValueScaler(self.scale)
        self.resolution = validate_resolution(self.resolution)


def convert_mesh(
    mesh: Mesh,
    options: Optional[ConversionOptions] = None,
    writer: Optional[Callable[..., None]] = None,
) -> List[Path]:
    """Convert an in-memory mesh to VTK files.

    Parameters
    ----------
    mesh : Mesh
        Mesh tally to convert, left untouched.
    options : ConversionOptions, optional
        Conversion choices, defaults otherwise.
    writer : callable, optional
        Replacement for the VTK writer, ``writer(dataset, path, config, field_data=None)``.

    Returns
    -------
    list of Path
        Files written, one per selected (energy, time) group.
    """
    options = options or ConversionOptions()

    selection = resolve_selection(mesh, options.energy, options.time)
    if constants.DEBUG:
        print(f"[debug] energy idx {list(selection.energies)}")
        print(f"[debug] time idx {list(selection.times)}")

    if not options.scaler.is_identity:
        print(f"[info] Scaling results by {options.scaler.factor:.5e}")
    if not options.include_errors:
        print("[info] Excluding error mesh from VTK")

    if mesh.geometry is Geometry.CYLINDRICAL:
        print(f"[info] Resolution set to {options.resolution}")
        if options.resolution > config.RESOLUTION_WARNING_THRESHOLD:
            print(f"[warning] Resolution {options.resolution} defines every vertex explicitly, "
                  f"expect large files")

    print("[info] Converting mesh to VTK objects")
    geometry = build_geometry(mesh, options.resolution)
    datasets = assemble_datasets(mesh, geometry, selection, options.scaler, options.include_errors)

    if options.plot_path:
        from .plotting import plot_geometry_mesh
        first = datasets[0]
        plot_geometry_mesh(
            geometry,
            first.values,
            title=f"Mesh {mesh.id}: energy {first.energy_label}, time {first.time_label}",
            save_path=options.plot_path,
        )

    print(f"[info] Writing {len(datasets)} VTK file(s)")
    dispatcher = OutputDispatcher(options.writer_config, writer, progress=options.progress)
    paths = dispatcher.dispatch(options.output, mesh, datasets, selection)
    for path in paths:
        print(f"[info] Wrote {path}")
    return paths


def run_conversion(
    file_path: str,
    tally_id: int,
    options: Optional[ConversionOptions] = None,
    writer: Optional[Callable[..., None]] = None,
) -> List[Path]:
    """Read a mesh tally from a meshtal file and convert it."""
    options = options or ConversionOptions()
    print(f"[info] Reading {file_path}")
    mesh = read_meshtal(file_path, tally_id)
    if constants.DEBUG:
        print(f"[debug] Mesh summary\n{mesh.summary()}")
    return convert_mesh(mesh, options, writer)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mesh2vtk",
        usage="mesh2vtk <file> <number> [options]",
        description="Convert MCNP mesh tallies to visual toolkit (VTK) files",
        epilog=(
            "examples:\n"
            "  mesh2vtk my_file.msht 104 -o my_output\n"
            "  mesh2vtk my_file.msht 104 --total\n"
            "  mesh2vtk my_file.msht 104 --energy 0 2 6 --time 1 total\n"
            "  mesh2vtk my_file.msht 104 --energy 1.0 20.0 1e2 --absolute\n"
            "  mesh2vtk my_file.msht 104 --format legacy-ascii\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("file", help="Path to input meshtal file")
    parser.add_argument("number", type=int, help="Mesh tally identifier, e.g. 104 for FMESH104:n")

    mesh_opts = parser.add_argument_group("Mesh options")
    mesh_opts.add_argument("--total", action="store_true",
                           help="Only extract 'Total' energy/time groups")
    mesh_opts.add_argument("--no-error", action="store_true",
                           help="Exclude error mesh from output files")
    mesh_opts.add_argument("-s", "--scale", type=float, default=config.DEFAULT_SCALE, metavar="num",
                           help="Multiply all results by a constant (errors are relative and unchanged)")
    mesh_opts.add_argument("-e", "--energy", nargs="+", default=[], metavar="list",
                           help="Filter energy group(s) by index or 'total'")
    mesh_opts.add_argument("-t", "--time", nargs="+", default=[], metavar="list",
                           help="Filter time group(s) by index or 'total'")
    mesh_opts.add_argument("-a", "--absolute", action="store_true",
                           help="Interpret filter values as MeV/shakes instead of group index")

    vtk_opts = parser.add_argument_group("Vtk options")
    vtk_opts.add_argument("-o", "--output", default=config.DEFAULT_OUTPUT_NAME, metavar="name",
                          help="Name of output file (excl. extension)")
    vtk_opts.add_argument("-f", "--format", default=config.DEFAULT_VTK_FORMAT, metavar="fmt",
                          choices=VtkFormat.choices(),
                          help="VTK output format: xml (default), legacy-ascii, legacy-binary")
    vtk_opts.add_argument("--resolution", type=int, default=config.DEFAULT_RESOLUTION, metavar="res",
                          help="Angular subdivision of cylindrical theta bins")
    vtk_opts.add_argument("--endian", default=config.DEFAULT_BYTE_ORDER, metavar="end",
                          choices=ByteOrder.choices(),
                          help="Byte ordering: big-endian (default), little-endian")
    vtk_opts.add_argument("--compressor", default=config.DEFAULT_COMPRESSOR, metavar="cmp",
                          choices=Compressor.choices(),
                          help="Compression method for xml: lzma (default), lz4, zlib, none")
    vtk_opts.add_argument("--plot", default=None, metavar="path",
                          help="Save a preview image of the reconstructed geometry")

    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Verbose logging")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Supress all log output (overrules --verbose)")
    return parser


def options_from_args(args: argparse.Namespace) -> ConversionOptions:
    """Build validated conversion options from parsed arguments."""
    return ConversionOptions(
        energy=GroupFilter.from_arguments(args.energy, args.total, args.absolute),
        time=GroupFilter.from_arguments(args.time, args.total, args.absolute),
        scale=args.scale,
        include_errors=not args.no_error,
        resolution=args.resolution,
        output=args.output,
        writer_config=WriterConfig.from_names(args.format, args.endian, args.compressor),
        plot_path=args.plot,
        progress=not args.quiet,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.total and (args.energy or args.time):
        parser.error("--total cannot be combined with --energy or --time")

    constants.DEBUG = args.verbose > 0 and not args.quiet

    with contextlib.ExitStack() as stack:
        if args.quiet:
            devnull = stack.enter_context(open(os.devnull, "w"))
            stack.enter_context(contextlib.redirect_stdout(devnull))
        try:
            options = options_from_args(args)
            run_conversion(args.file, args.number, options)
        except Mesh2VtkError as exc:
            print(f"[error] {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
