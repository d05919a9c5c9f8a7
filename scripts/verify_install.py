#!/usr/bin/env python
"""
TraceCAD - Installation Verification Script

Run this script to verify all dependencies are correctly installed.
"""

import sys
from pathlib import Path

# Add project root to path for package import
sys.path.insert(0, str(Path(__file__).parent.parent))


def check_package(name: str, import_name: str = None, version_attr: str = "__version__") -> tuple[bool, str]:
    """Check if a package is installed and return version."""
    import_name = import_name or name
    try:
        module = __import__(import_name)
        version = getattr(module, version_attr, "unknown")
        return True, str(version)
    except ImportError as e:
        return False, str(e)


def check_vision() -> tuple[bool, str]:
    """Check that the OpenCV build has the routines detection needs."""
    try:
        from tracecad.pipeline import check_vision_capabilities
        caps = check_vision_capabilities()
        if caps.ready:
            return True, f"OpenCV {caps.opencv_version}"
        return False, f"missing: {', '.join(caps.missing())}"
    except ImportError as e:
        return False, str(e)


def check_constants() -> tuple[bool, str]:
    """Check if constants module loads correctly."""
    try:
        from tracecad.constants import (
            DEFAULT_BLOCK_RADIUS,
            MERGE_ANGLE_TOLERANCE_DEG,
            DXF_VERSION,
        )
        return True, f"loaded ({DEFAULT_BLOCK_RADIUS=}, {MERGE_ANGLE_TOLERANCE_DEG=}, {DXF_VERSION=})"
    except ImportError as e:
        return False, str(e)


def main():
    print("=" * 60)
    print("TraceCAD - Installation Verification")
    print("=" * 60)
    print()

    results = []

    # Core packages
    print("Core Dependencies:")
    print("-" * 40)

    packages = [
        ("pymupdf", "pymupdf", "__version__"),
        ("opencv", "cv2", "__version__"),
        ("numpy", "numpy", "__version__"),
        ("pillow", "PIL", "__version__"),
        ("ezdxf", "ezdxf", "__version__"),
    ]

    for name, import_name, version_attr in packages:
        ok, info = check_package(name, import_name, version_attr)
        status = "PASS" if ok else "FAIL"
        print(f"  {name:25} [{status}] {info}")
        results.append((name, ok))

    print()
    print("Vision Routines:")
    print("-" * 40)

    ok, info = check_vision()
    status = "PASS" if ok else "FAIL"
    print(f"  {'opencv routines':25} [{status}] {info}")
    results.append(("opencv routines", ok))

    print()
    print("Configuration:")
    print("-" * 40)

    # Constants
    ok, info = check_constants()
    status = "PASS" if ok else "FAIL"
    print(f"  {'constants.py':25} [{status}] {info}")
    results.append(("constants", ok))

    print()
    print("=" * 60)

    # Summary
    passed = sum(1 for _, ok in results if ok)
    total = len(results)

    if passed == total:
        print(f"ALL CHECKS PASSED ({passed}/{total})")
        print("Environment is ready for tracing.")
        return 0
    else:
        failed = [name for name, ok in results if not ok]
        print(f"SOME CHECKS FAILED ({passed}/{total})")
        print(f"Failed: {', '.join(failed)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
