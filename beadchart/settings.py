import os
from pathlib import Path

APP_TITLE = os.getenv("BEADCHART_APP_TITLE", "Bead Pattern")

STORAGE_BACKEND = os.getenv("BEADCHART_STORAGE_BACKEND", "fs")  # 'fs' or 's3'
DATA_DIR = os.getenv("BEADCHART_DATA_DIR", str(Path(__file__).resolve().parent / "data"))
S3_BUCKET = os.getenv("BEADCHART_S3_BUCKET", "beadchart")
S3_ENDPOINT_URL = os.getenv("BEADCHART_S3_ENDPOINT_URL", "http://minio:9000")
S3_ACCESS_KEY = os.getenv("BEADCHART_S3_ACCESS_KEY", "minioadmin")
S3_SECRET_KEY = os.getenv("BEADCHART_S3_SECRET_KEY", "minioadmin")

# Labeled export (pixels)
CELL_SIZE = int(os.getenv("BEADCHART_CELL_SIZE", "50"))
MARGIN = int(os.getenv("BEADCHART_MARGIN", "80"))
TITLE_HEIGHT = int(os.getenv("BEADCHART_TITLE_HEIGHT", "80"))
BLOCK_SIZE = int(os.getenv("BEADCHART_BLOCK_SIZE", "10"))
MAX_SURFACE_PIXELS = int(os.getenv("BEADCHART_MAX_SURFACE_PIXELS", str(20000 * 20000)))

# Paginated export, 29x29 is a standard square pegboard
TILE_WIDTH = int(os.getenv("BEADCHART_TILE_WIDTH", "29"))
TILE_HEIGHT = int(os.getenv("BEADCHART_TILE_HEIGHT", "29"))
EXPORT_WORKERS = int(os.getenv("BEADCHART_EXPORT_WORKERS", "4"))

# Interactive viewer
PREVIEW_CELL_SIZE = int(os.getenv("BEADCHART_PREVIEW_CELL_SIZE", "12"))
ZOOM_MIN = float(os.getenv("BEADCHART_ZOOM_MIN", "0.1"))
ZOOM_MAX = float(os.getenv("BEADCHART_ZOOM_MAX", "5.0"))
WHEEL_SENSITIVITY = float(os.getenv("BEADCHART_WHEEL_SENSITIVITY", "0.001"))
PINCH_SENSITIVITY = float(os.getenv("BEADCHART_PINCH_SENSITIVITY", "0.005"))
TAP_THRESHOLD = float(os.getenv("BEADCHART_TAP_THRESHOLD", "5"))

UNDO_DEPTH = int(os.getenv("BEADCHART_UNDO_DEPTH", "50"))
