import base64
import json

import pytest

from cutout.core.exceptions import DecodeError, ParseError
from cutout.pipeline.decoder import decode_body, decode_request, parse_request
from cutout.pipeline.schemas import GenerationRequest

FULL_BODY = {
    "prompt": "A futuristic cityscape",
    "filename": "city-001",
    "resolution": "1024x1024",
    "aspect_ratio": "16x9",
    "num_images": 2,
    "style_type": "REALISTIC",
    "colour_palette": {
        "members": [
            {"color_hex": "#FF0000", "color_weight": 0.6},
            {"color_hex": "#00FF00"},
        ]
    },
}


def test_plain_body_fields_match_input():
    request = decode_request(json.dumps(FULL_BODY), False)

    assert request.model_dump(exclude_none=True) == FULL_BODY


def test_base64_body_matches_plain_body():
    raw = json.dumps(FULL_BODY).encode()
    encoded = base64.b64encode(raw).decode()

    assert decode_request(encoded, True) == decode_request(raw, False)


def test_missing_optional_fields_are_legal():
    request = decode_request('{"prompt": "a red fox"}', False)

    assert request.prompt == "a red fox"
    assert request.filename == ""
    assert request.resolution is None
    assert request.aspect_ratio is None
    assert request.num_images is None
    assert request.style_type is None
    assert request.colour_palette is None


def test_missing_prompt_is_not_rejected():
    request = decode_request('{"filename": "fox"}', False)

    assert request.prompt == ""
    assert request.filename == "fox"


def test_unknown_fields_are_ignored():
    request = decode_request('{"prompt": "fox", "magic_prompt": "ON"}', False)

    assert request == GenerationRequest(prompt="fox")


def test_request_is_immutable():
    request = decode_request('{"prompt": "fox"}', False)

    with pytest.raises(Exception):
        request.prompt = "wolf"


def test_malformed_base64_raises_decode_error():
    with pytest.raises(DecodeError) as exc_info:
        decode_body("not*base64!!", True)

    assert exc_info.value.code == 400
    assert exc_info.value.public_message == "Bad Request: invalid base64"


def test_malformed_json_raises_parse_error():
    with pytest.raises(ParseError) as exc_info:
        decode_request('{"prompt": ', False)

    assert exc_info.value.code == 400
    assert exc_info.value.public_message == "Bad Request"


def test_malformed_json_inside_valid_base64_raises_parse_error():
    encoded = base64.b64encode(b"{not json").decode()

    with pytest.raises(ParseError) as exc_info:
        decode_request(encoded, True)

    assert exc_info.value.code == 400


def test_non_object_json_raises_parse_error():
    with pytest.raises(ParseError):
        parse_request(b'["prompt"]')


def test_wrong_field_type_raises_parse_error():
    with pytest.raises(ParseError):
        parse_request(b'{"prompt": "fox", "num_images": "many"}')


def test_plain_bytes_pass_through():
    assert decode_body(b'{"prompt": "fox"}', False) == b'{"prompt": "fox"}'


def test_empty_body_is_a_parse_error():
    with pytest.raises(ParseError):
        decode_request(None, False)


def test_line_wrapped_base64_is_accepted():
    payload = json.dumps({"prompt": "fox", "filename": "fox", "style_type": "REALISTIC" * 10}).encode()
    wrapped = base64.encodebytes(payload).decode()
    assert "\n" in wrapped.rstrip("\n")

    assert decode_body(wrapped, True) == payload
    assert decode_body(wrapped.replace("\n", "\r\n").encode(), True) == payload


def test_base64_with_inner_spaces_is_still_rejected():
    encoded = base64.b64encode(b'{"prompt": "fox"}').decode()

    with pytest.raises(DecodeError):
        decode_body(encoded[:4] + " " + encoded[4:], True)


def test_null_document_is_an_empty_request():
    assert parse_request(b"null") == GenerationRequest()
