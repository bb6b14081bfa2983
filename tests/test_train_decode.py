"""Tests for the training and decoding command line tools."""

import io
import logging

import pytest

from suflem import decode, train
from suflem.model import SuffixModel, load_model


def test_train_main(tmp_path, corpus_path):
    model_path = tmp_path / 'models' / 'model.suflem'
    train.main(['--model-path', str(model_path),
                '--train-data-path', str(corpus_path),
                '--max-suffix-size', '2'])
    model = load_model(model_path)
    assert model.is_trimmed()
    assert model.max_suffix_size == 2
    assert model.lemmatize('bats') == 'bat'


def test_train_main_without_trim(tmp_path, corpus_path):
    model_path = tmp_path / 'model.suflem'
    train.main(['--model-path', str(model_path),
                '--train-data-path', str(corpus_path),
                '--no-trim'])
    model = load_model(model_path)
    assert model.state == SuffixModel.TRAINED
    assert model.max_suffix_size == 8


def test_train_main_requires_paths():
    with pytest.raises(SystemExit):
        train.main(['--model-path', 'model.suflem'])


def test_decode_tokens(cats_model):
    fout = io.BytesIO()
    n_tokens = decode.decode_tokens(cats_model,
                                    io.BytesIO(b'cats dogs\n\tbats\n'), fout)
    assert n_tokens == 3
    assert fout.getvalue() == b'cat\ndog\nbat\n'


def test_decode_tokens_echoes_invalid_token(cats_model):
    fout = io.BytesIO()
    decode.decode_tokens(cats_model, io.BytesIO(b'\xfeab cats\n'), fout,
                         flush=True)
    assert fout.getvalue() == b'\xfeab\ncat\n'


def test_decode_tokens_splits_on_ascii_whitespace_only(cats_model):
    fout = io.BytesIO()
    fin = io.BytesIO('cats\u00a0dogs\u2028bats\x0blogs\n'.encode('utf-8'))
    n_tokens = decode.decode_tokens(cats_model, fin, fout)
    assert n_tokens == 2
    assert fout.getvalue() == 'cats\u00a0dogs\u2028bat\nlog\n'.encode('utf-8')


def test_decode_file_with_targets(tmp_path, cats_model):
    path = tmp_path / 'test.tsv'
    path.write_text('cats\tcat\t5\nbats\tbat\t1\nfoxes\tfox\t2\n',
                    encoding='utf-8')
    fout = io.BytesIO()
    results = decode.decode_file(cats_model, path, fout)

    assert fout.getvalue().decode('utf-8').splitlines() == [
        'source\ttarget\tprediction',
        'cats\tcat\tcat',
        'bats\tbat\tbat',
        'foxes\tfox\tfoxe']
    assert results['words'] == 3
    assert results['accuracy'] == pytest.approx(2 / 3)
    assert results['weighted_accuracy'] == pytest.approx(0.75)


def test_decode_file_with_invalid_counts(tmp_path, cats_model, caplog):
    path = tmp_path / 'test.tsv'
    path.write_text('cats\tcat\t2\n\nbats\tbat\t\nfoxes\tfox\tmany\n',
                    encoding='utf-8')
    fout = io.BytesIO()
    with caplog.at_level(logging.WARNING, logger='suflem.decode'):
        results = decode.decode_file(cats_model, path, fout)

    assert len(fout.getvalue().splitlines()) == 4
    assert results['words'] == 3
    assert results['accuracy'] == pytest.approx(2 / 3)
    assert results['weighted_accuracy'] == pytest.approx(1.0)
    assert 'line 3' in caplog.text
    assert 'line 4' in caplog.text


def test_decode_file_without_valid_counts(tmp_path, cats_model):
    path = tmp_path / 'test.tsv'
    path.write_text('cats\tcat\t-1\n', encoding='utf-8')
    results = decode.decode_file(cats_model, path, io.BytesIO())
    assert results['accuracy'] == pytest.approx(1.0)
    assert 'weighted_accuracy' not in results


def test_decode_file_without_targets(tmp_path, cats_model):
    path = tmp_path / 'words.tsv'
    path.write_text('logs\n\nbirds\n', encoding='utf-8')
    fout = io.BytesIO()
    results = decode.decode_file(cats_model, path, fout, file_batch_size=1)

    assert fout.getvalue() == b'source\tprediction\nlogs\tlog\nbirds\tbird\n'
    assert results == {'words': 2}


def test_decode_file_rejects_too_many_columns(tmp_path, cats_model):
    path = tmp_path / 'test.tsv'
    path.write_text('cats\tcat\t5\textra\n', encoding='utf-8')
    with pytest.raises(ValueError):
        decode.decode_file(cats_model, path, io.BytesIO())


def test_decode_main(tmp_path, cats_model):
    model_path = tmp_path / 'model.suflem'
    cats_model.trim()
    cats_model.save(model_path)
    source_path = tmp_path / 'words.tsv'
    source_path.write_text('bats\n', encoding='utf-8')
    decoded_path = tmp_path / 'out' / 'decoded.tsv'

    decode.main(['--model-path', str(model_path),
                 '--source-data-path', str(source_path),
                 '--decoded-data-path', str(decoded_path)])
    assert decoded_path.read_bytes() == b'source\tprediction\nbats\tbat\n'
