import logging
import os

from py4web import Session, Translator, DAL
from py4web.utils.dbstore import DBStore

from .settings import APP_FOLDER, LOG_LEVEL, T_FOLDER
from .modules.band_reader.analyzer import AnalysisCoordinator

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

# Database
DB_FOLDER = os.path.join(APP_FOLDER, 'databases')
if not os.path.exists(DB_FOLDER):
    os.makedirs(DB_FOLDER)

db = DAL('sqlite://storage.db', folder=DB_FOLDER)

# Session
session = Session(secret=os.environ.get('RESISTOR_SITE_SECRET', 'my_secret_key'), storage=DBStore(db))

T = Translator(T_FOLDER)

# Shared analyzer: holds the last result for every client of this process
analyzer = AnalysisCoordinator()
