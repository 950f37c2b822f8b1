#!/usr/bin/env python
"""
mesh2vtk - Conversion Runner Script

Usage:
    python scripts/run_conversion.py my_file.msht 104
    python scripts/run_conversion.py my_file.msht 104 --total -o output/fmesh
    python scripts/run_conversion.py my_file.msht 104 --resolution 3 --plot Figures/mesh.png

Equivalent to the ``mesh2vtk`` console script installed with the package.
"""

from pathlib import Path
import sys

# 添加项目根目录到路径（确保可以导入 mesh2vtk）
project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from mesh2vtk.runner import main


if __name__ == "__main__":
    sys.exit(main())
