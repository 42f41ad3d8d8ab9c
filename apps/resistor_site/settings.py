import os

APP_FOLDER = os.path.dirname(__file__)
UPLOADS_FOLDER = os.environ.get('RESISTOR_SITE_UPLOADS', os.path.join(APP_FOLDER, 'uploads'))
T_FOLDER = os.path.join(APP_FOLDER, 'translations')

LOG_LEVEL = os.environ.get('RESISTOR_SITE_LOG_LEVEL', 'INFO')

# Uploads wider than this are downscaled before analysis (0 disables)
MAX_ANALYSIS_WIDTH = int(os.environ.get('RESISTOR_SITE_MAX_WIDTH', 1024))

# Capture framing: centre strip, this fraction of the photo width, 2:1
CROP_WIDTH_FRACTION = float(os.environ.get('RESISTOR_SITE_CROP_FRACTION', 0.5))

ALLOWED_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.webp']
HISTORY_LIMIT = 20

if not os.path.exists(UPLOADS_FOLDER):
    os.makedirs(UPLOADS_FOLDER)

if not os.path.exists(T_FOLDER):
    os.makedirs(T_FOLDER)
