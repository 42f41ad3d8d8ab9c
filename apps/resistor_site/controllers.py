import logging
import os
import uuid
from datetime import datetime, timezone

import cv2
from py4web import action, request, abort, URL
from ombott import static_file

from .common import session, T, analyzer
from .settings import (
    UPLOADS_FOLDER,
    ALLOWED_EXTENSIONS,
    MAX_ANALYSIS_WIDTH,
    CROP_WIDTH_FRACTION,
    HISTORY_LIMIT,
)
from .modules.band_reader.buffer import buffer_from_bgr, center_crop
from .modules.band_reader.decoder import format_resistance, resistance_range, tolerance_label
from .modules.band_reader.overlay import create_result_overlay

logger = logging.getLogger(__name__)


def _is_safe_filename(filename):
    if not filename or '..' in filename or '/' in filename or '\\' in filename:
        return False
    file_path = os.path.join(UPLOADS_FOLDER, filename)
    return os.path.abspath(file_path).startswith(os.path.abspath(UPLOADS_FOLDER))


def _describe(result):
    """Result dict plus the human-readable value the results screen shows."""
    data = result.to_dict()
    colors = result.color_sequence
    if result.resistance_ohms is not None:
        data['resistance_text'] = format_resistance(result.resistance_ohms)
    else:
        data['resistance_text'] = "Could not determine resistance"
    data['tolerance_text'] = tolerance_label(colors[-1]) if colors else "Unknown"
    if result.resistance_ohms is not None and result.tolerance_fraction is not None:
        low, high = resistance_range(result.resistance_ohms, result.tolerance_fraction)
        data['range_text'] = f"{format_resistance(low)} - {format_resistance(high)}"
    else:
        data['range_text'] = None
    return data


def _history_item(image_filename, overlay_filename, result):
    return {
        'id': uuid.uuid4().hex,
        'image_filename': image_filename,
        'overlay_filename': overlay_filename,
        'colors': result.color_names,
        'resistance_ohms': result.resistance_ohms,
        'timestamp': datetime.now(timezone.utc).isoformat(timespec='seconds'),
    }


def _error(message):
    return dict(error=message, results=None, image_url=None, overlay_url=None,
                history=session.get('analysis_history', []))


# Dashboard
@action('index')
@action.uses(session, T)
def index():
    last = analyzer.last_result
    return dict(
        last_result=_describe(last) if last else None,
        history=session.get('analysis_history', []),
        max_analysis_width=MAX_ANALYSIS_WIDTH,
        crop_width_fraction=CROP_WIDTH_FRACTION,
    )


@action('analyze', method=['POST'])
@action.uses(session, T)
def analyze():
    if 'analysis_history' not in session:
        session['analysis_history'] = []

    try:
        crop = request.forms.get('crop') in ('1', 'on', 'true')
        uploaded_file = request.files.get('image')

        if uploaded_file and uploaded_file.filename:
            ext = os.path.splitext(uploaded_file.filename)[1].lower()
            if ext not in ALLOWED_EXTENSIONS:
                return _error("Invalid file type")

            safe_filename = f"{uuid.uuid4()}{ext}"
            uploaded_file.save(os.path.join(UPLOADS_FOLDER, safe_filename))
            session['chosen_file'] = safe_filename
        else:
            # Re-analyze the previously uploaded file
            safe_filename = session.get('chosen_file')

        if not safe_filename:
            return _error("No file selected")
        if not _is_safe_filename(safe_filename):
            return _error("Invalid file path")

        file_path = os.path.join(UPLOADS_FOLDER, safe_filename)
        if not os.path.exists(file_path):
            return _error("File not found")

        image = cv2.imread(file_path)
        if image is None:
            return _error("Could not load image")
        if crop:
            image = center_crop(image, width_fraction=CROP_WIDTH_FRACTION)

        buffer = buffer_from_bgr(image, max_width=MAX_ANALYSIS_WIDTH or None)
        result = analyzer.analyze(buffer)

        overlay_image = create_result_overlay(image, result)
        overlay_filename = f"overlay_{os.path.splitext(safe_filename)[0]}.png"
        cv2.imwrite(os.path.join(UPLOADS_FOLDER, overlay_filename), overlay_image)

        results_dict = _describe(result)

        history_item = _history_item(safe_filename, overlay_filename, result)
        # Most recent first
        session['analysis_history'] = ([history_item] + session['analysis_history'])[:HISTORY_LIMIT]

        return dict(
            results=results_dict,
            error=None,
            image_url=URL('uploads', safe_filename),
            overlay_url=URL('uploads', overlay_filename),
            image_width=image.shape[1],
            image_height=image.shape[0],
            history=session['analysis_history'],
        )

    except ValueError as e:
        logger.warning("Rejected analysis request: %s", e)
        return _error(str(e))
    except Exception as e:
        logger.exception("Analysis request failed")
        return _error(str(e))


@action('reset_results', method='POST')
@action.uses(session)
def reset_results():
    analyzer.reset_results()
    session['chosen_file'] = None
    session['analysis_history'] = []
    return dict(error=None, last_result=None)


# Serve uploads
@action('uploads/<filename>')
def serve_upload(filename):
    # Prevent path traversal attacks
    if not _is_safe_filename(filename):
        abort(403)
    return static_file(filename, root=UPLOADS_FOLDER)
