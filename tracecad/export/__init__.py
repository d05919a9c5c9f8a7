# Output generation (DXF export and preview overlay)

from .dxf_writer import (
    NothingToExportError,
    normalize_scale,
    to_cad_point,
    build_dxf_document,
    export_dxf,
    write_dxf,
)

from .preview import (
    render_preview,
    encode_png,
    write_preview,
)

__all__ = [
    # DXF
    "NothingToExportError",
    "normalize_scale",
    "to_cad_point",
    "build_dxf_document",
    "export_dxf",
    "write_dxf",
    # Preview
    "render_preview",
    "encode_png",
    "write_preview",
]
