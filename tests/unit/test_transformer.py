"""
Unit tests for the entry transformer.
"""
import os

import pytest

from elysia_lambda.build.transformer import EntryTransformer, rewrite_source
from elysia_lambda.errors import TransformError


@pytest.mark.parametrize('source, expected', [
    ("import { lambda } from 'elysia-lambda'", "import { hijack } from 'elysia-lambda'"),
    ("app.use(lambda())", "app.use(hijack())"),
    ("import { cors, lambda, swagger } from 'x'", "import { cors, hijack, swagger } from 'x'"),
    ("plugins(a,lambda)", "plugins(a,hijack)"),
    ("wrap(lambda)", "wrap(hijack)"),
])
def test_rewrites_import_and_call_shapes(source, expected):
    assert rewrite_source(source)[0] == expected


@pytest.mark.parametrize('source', [
    "const lambdaClient = createClient()",
    "aws.lambda.invoke()",
    "mylambda(x)",
    "lambda_handler(x)",
    "call( lambda_handler)",
])
def test_leaves_other_identifiers(source):
    assert rewrite_source(source) == (source, 0)


def test_closing_paren_not_a_left_delimiter():
    assert rewrite_source(")lambda(") == (")lambda(", 0)


def test_adjacent_matches_do_not_share_delimiters():
    # the comma between the two tokens is consumed by the first match
    assert rewrite_source("(lambda,lambda)") == ("(hijack,lambda)", 1)


def test_string_literals_are_rewritten_too():
    # known limitation of the text based rewrite
    source = "console.log('deploying to lambda (aws)')"

    assert rewrite_source(source) == ("console.log('deploying to hijack (aws)')", 1)


def test_no_token_is_byte_identical(tmp_path):
    entry = tmp_path / 'index.ts'
    content = "import { Elysia } from 'elysia'\r\nnew Elysia().listen(3000)\r\n"
    entry.write_bytes(content.encode('utf-8'))

    result = EntryTransformer().transform(str(entry), 1700000000000)

    assert result.rewrites == 0
    with open(result.path, 'rb') as f:
        assert f.read() == content.encode('utf-8')


def test_transform_writes_timestamped_copy(entry_file):
    original = entry_file.read_text(encoding='utf-8')

    result = EntryTransformer().transform(str(entry_file), 1700000000000)

    assert result.path == os.path.join(str(entry_file.parent), '1700000000000.ts')
    assert result.rewrites == 2
    with open(result.path, encoding='utf-8') as f:
        mutated = f.read()
    assert "import { hijack } from 'elysia-lambda'" in mutated
    assert ".use(hijack())" in mutated
    assert entry_file.read_text(encoding='utf-8') == original


def test_unreadable_entry(tmp_path):
    with pytest.raises(TransformError, match='Unable to read entry file'):
        EntryTransformer().transform(str(tmp_path / 'missing.ts'), 1)
