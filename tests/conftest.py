"""Shared fixtures for the suflem tests."""

import pytest

from suflem.model import SuffixModel


@pytest.fixture
def cats_model():
    """Untrimmed model trained on two plural forms."""
    model = SuffixModel(max_suffix_size=2)
    model.update('cats', 'cat', 5)
    model.update('dogs', 'dog', 3)
    return model


@pytest.fixture
def corpus_path(tmp_path):
    path = tmp_path / 'corpus.tsv'
    path.write_text('cats\tcat\t5\n'
                    'dogs\tdog\t3\n'
                    'ran\trun\t1\n',
                    encoding='utf-8')
    return path
