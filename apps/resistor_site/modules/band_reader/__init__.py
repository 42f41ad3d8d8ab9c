from .analyzer import AnalysisCoordinator, run_pipeline
from .buffer import Extent, PixelBuffer, load_pixel_buffer
from .palette import BandColor, BandRole
from .schemas import AnalysisResult, BandRect
