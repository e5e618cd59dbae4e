"""
Unit tests for launcher generation.
"""
import pytest

from elysia_lambda.build.launcher import LauncherGenerator, render_launcher
from elysia_lambda.build.transformer import TransformResult
from elysia_lambda.errors import InstanceNotFoundError


def test_render_launcher():
    script = render_launcher('/work/app/1700000000000.ts')

    assert script == (
        "\n"
        "import { instance } from 'elysia-lambda'\n"
        "import '/work/app/1700000000000.ts' // the entry point import\n"
        "export default {\n"
        "  js: instance().innerHandle\n"
        "}"
    )


def test_render_launcher_windows_path():
    assert "import 'C:/work/app/1.ts'" in render_launcher('C:\\work\\app\\1.ts')


def test_generate_writes_launcher(tmp_path):
    out = tmp_path / '1700000000000.js'

    LauncherGenerator().generate(TransformResult(path='/work/1700000000000.ts', rewrites=2), str(out))

    assert "import '/work/1700000000000.ts'" in out.read_text(encoding='utf-8')


def test_generate_without_instance_fails(tmp_path):
    out = tmp_path / '1700000000000.js'

    with pytest.raises(InstanceNotFoundError, match='instance not found'):
        LauncherGenerator().generate(TransformResult(path='/work/1700000000000.ts', rewrites=0), str(out))

    assert not out.exists()
