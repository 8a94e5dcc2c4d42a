"""
HTTP surface for the document scanner.
"""

import logging
from typing import Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from flasgger import Swagger

from document_detection import (
    BoundaryDetector,
    EncodingError,
    GeometryError,
    RectifyOptions,
    ResourceError,
    ScannerConfig,
    encode_image,
    framing_report,
    rectify,
)
from document_detection.resize import downscale_to_max_dimension

from .uploads import parse_bool, parse_corners, read_image

logger = logging.getLogger(__name__)

MEGABYTE = (2 ** 10) ** 2

swagger_config = {
    "headers": [],
    "specs_route": "/docs/",
    "specs": [
        {
            "endpoint": 'apispec_1',
            "route": '/docs-json',
            "rule_filter": lambda rule: True,  # all in
            "model_filter": lambda tag: True,  # all in
        }
    ],
}


def create_app(config: Optional[ScannerConfig] = None) -> Flask:
    config = config or ScannerConfig.from_env()
    detector = BoundaryDetector(config)

    app = Flask(__name__)
    CORS(app)

    app.config['MAX_CONTENT_LENGTH'] = 50 * MEGABYTE
    app.config['MAX_FORM_MEMORY_SIZE'] = 50 * MEGABYTE
    app.config['SCANNER_CONFIG'] = config

    Swagger(app, config=swagger_config, merge=True)

    @app.errorhandler(GeometryError)
    def handle_geometry_error(e):
        return jsonify(message=str(e)), 422

    @app.errorhandler(EncodingError)
    def handle_encoding_error(e):
        return jsonify(message=str(e)), 500

    @app.errorhandler(ResourceError)
    def handle_resource_error(e):
        return jsonify(message=str(e)), 413

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return jsonify(message=str(e)), 400

    @app.route('/is-available', methods=['GET'])
    def is_available():
        """
        Health check
        ---
        responses:
          200:
            description: Service is up
        """
        return jsonify(isAvailable=True), 200

    @app.route('/detect', methods=['POST'])
    def detect():
        """
        Detect the document boundary in an uploaded image
        ---
        consumes:
          - multipart/form-data
        parameters:
          - name: file
            in: formData
            type: file
            required: true
        responses:
          200:
            description: Corners of the document, or null when no document was found
          400:
            description: Missing or undecodable image
        """
        image = read_image(request.files)
        if image is None:
            return jsonify(message="No file"), 400

        corners = detector.detect(image)
        h, w = image.shape[:2]

        return jsonify(
            corners=corners.to_dict() if corners is not None else None,
            width=w,
            height=h
        ), 200

    @app.route('/rectify', methods=['POST'])
    def rectify_file():
        """
        Rectify an uploaded image to a flat scan
        ---
        consumes:
          - multipart/form-data
        produces:
          - image/jpeg
        parameters:
          - name: file
            in: formData
            type: file
            required: true
          - name: corners
            in: formData
            type: string
            required: false
            description: JSON {topLeft, topRight, bottomRight, bottomLeft}; detected when omitted
          - name: width
            in: query
            type: integer
          - name: enhance
            in: query
            type: boolean
          - name: quality
            in: query
            type: number
        responses:
          200:
            description: Encoded image; X-Document-Found tells whether it was rectified
          422:
            description: Degenerate corners
        """
        image = read_image(request.files)
        if image is None:
            return jsonify(message="No file"), 400

        options = RectifyOptions(
            target_width=request.args.get('width', default=config.target_width, type=int),
            enhance=parse_bool(request.args.get('enhance')),
            quality=request.args.get('quality', default=config.quality, type=float),
        )

        corners = parse_corners(request.form.get('corners'))
        if corners is None:
            corners = detector.detect(image)

        if corners is None:
            # Fall back to the unmodified (size-bounded) image
            logger.info("No document found, returning original image")
            fallback, _ = downscale_to_max_dimension(image, config.encode_max_dimension)
            data = encode_image(fallback, options.quality, options.image_format)
            found = False
        else:
            data = rectify(image, corners, options, config)
            found = True

        response = Response(data, mimetype='image/jpeg')
        response.headers['X-Document-Found'] = 'true' if found else 'false'
        return response

    @app.route('/evaluate-framing', methods=['POST'])
    def evaluate_framing_route():
        """
        Judge whether a live-preview document is well framed
        ---
        consumes:
          - application/json
        parameters:
          - name: body
            in: body
            required: true
            schema:
              type: object
              properties:
                corners:
                  type: object
                frameWidth:
                  type: integer
                frameHeight:
                  type: integer
        responses:
          200:
            description: Framing verdict
        """
        payload = request.get_json(silent=True) or {}
        corners = parse_corners(payload.get('corners'))
        if corners is None:
            return jsonify(message="Missing corners"), 400

        try:
            frame_width = int(payload['frameWidth'])
            frame_height = int(payload['frameHeight'])
        except (KeyError, TypeError, ValueError):
            return jsonify(message="frameWidth and frameHeight are required integers"), 400

        report = framing_report(
            corners,
            frame_width,
            frame_height,
            margin=config.framing_margin,
            min_ratio=config.framing_min_ratio,
            max_ratio=config.framing_max_ratio
        )

        return jsonify(
            wellFramed=report.well_framed,
            withinMargins=report.within_margins,
            areaRatio=report.area_ratio
        ), 200

    return app
