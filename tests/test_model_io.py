"""
Tests for poremodel.core.model_io text tables.
"""
import os
import warnings

import pytest
import numpy as np

from poremodel.core.alphabet import DNA_ALPHABET
from poremodel.core.errors import ParseError, SizeMismatchError, UnsupportedAlphabetError
from poremodel.core.model import PoreModel
from poremodel.core.model_io import load_model, save_model

from conftest import make_states, write_table


class TestLoadModel:
    def test_loads_shuffled_table(self, k4_table, k4_rows):
        model = load_model(k4_table)
        assert model.k == 4
        assert len(model) == 256
        assert model.name == 'r9_k4'
        assert model.is_scaled is False
        for rank, (kmer, *params) in enumerate(k4_rows):
            assert DNA_ALPHABET.kmer_rank(kmer, 4) == rank
            assert tuple(model.states[rank]) == pytest.approx(tuple(params))

    def test_name_defaults_to_basename(self, tmp_path, k4_rows):
        path = write_table(tmp_path / 'plain.model', k4_rows, name=None)
        assert load_model(path).name == 'plain.model'

    def test_comment_and_blank_lines(self, tmp_path, k4_rows):
        path = tmp_path / 'commented.model'
        write_table(path, k4_rows)
        with open(path, 'a') as f:
            f.write('# trailing comment\n\n')
        assert len(load_model(str(path))) == 256

    def test_whitespace_separated(self, tmp_path):
        path = tmp_path / 'spaces.model'
        rows = [f"{kmer}  {i}.5 1.0 0.5 0.25" for i, kmer in enumerate(DNA_ALPHABET.iter_kmers(2))]
        path.write_text('#model_name  spaced\n' + '\n'.join(rows) + '\n')
        model = load_model(str(path))
        assert model.name == 'spaced'
        assert model.get_parameters('TT')['level_mean'] == 15.5

    def test_extra_columns_ignored(self, tmp_path):
        path = tmp_path / 'weights.model'
        rows = [f"{kmer}\t60.0\t1.0\t0.5\t0.25\t999.0" for kmer in DNA_ALPHABET.iter_kmers(1)]
        path.write_text('\n'.join(rows) + '\n')
        model = load_model(str(path))
        assert model.k == 1
        np.testing.assert_array_equal(model.states['sd_stdv'], [0.25] * 4)

    @pytest.mark.parametrize('n_rows', [255, 257])
    def test_row_count_mismatch(self, tmp_path, k4_rows, n_rows):
        rows = k4_rows[:n_rows] if n_rows < 256 else k4_rows + [k4_rows[0]]
        path = write_table(tmp_path / 'bad.model', rows)
        with pytest.raises(SizeMismatchError) as exc_info:
            load_model(path)
        assert exc_info.value.expected == 256
        assert exc_info.value.found == n_rows

    def test_empty_table(self, tmp_path):
        path = write_table(tmp_path / 'empty.model', [])
        with pytest.raises(SizeMismatchError):
            load_model(path)

    def test_duplicate_masks_missing_by_default(self, tmp_path, k4_rows, caplog):
        rows = k4_rows[:-1] + [k4_rows[0]]
        path = write_table(tmp_path / 'dup.model', rows)
        with caplog.at_level('WARNING'):
            model = load_model(path)
        assert len(model) == 256
        assert model.states['level_mean'][255] == 0.0
        assert 'missing or listed more than once' in caplog.text

    def test_duplicate_rejected_when_strict(self, tmp_path, k4_rows):
        rows = k4_rows[:-1] + [k4_rows[0]]
        path = write_table(tmp_path / 'dup.model', rows)
        with pytest.raises(SizeMismatchError):
            load_model(path, strict=True)

    def test_too_few_fields(self, tmp_path):
        path = tmp_path / 'short.model'
        path.write_text('#model_name\tx\nAA\t1.0\t2.0\t3.0\n')
        with pytest.raises(ParseError) as exc_info:
            load_model(str(path))
        assert exc_info.value.line_no == 2

    def test_non_numeric_field(self, tmp_path):
        path = tmp_path / 'text.model'
        path.write_text('AA\t1.0\tabc\t3.0\t4.0\n')
        with pytest.raises(ParseError):
            load_model(str(path))

    def test_inconsistent_kmer_length(self, tmp_path):
        path = tmp_path / 'mixed.model'
        path.write_text('AA\t1.0\t1.0\t1.0\t1.0\nACG\t1.0\t1.0\t1.0\t1.0\n')
        with pytest.raises(ParseError):
            load_model(str(path))

    def test_unknown_symbol(self, tmp_path):
        path = tmp_path / 'n.model'
        path.write_text('AN\t1.0\t1.0\t1.0\t1.0\n')
        with pytest.raises(UnsupportedAlphabetError):
            load_model(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_model(str(tmp_path / 'nope.model'))


class TestSaveModel:
    def test_round_trip_exact(self, tmp_path):
        model = PoreModel(make_states(256, seed=11), k=4, name='orig')
        path = str(tmp_path / 'out.model')
        save_model(model, path)

        loaded = load_model(path)
        assert loaded.name == 'orig'
        assert loaded.k == 4
        assert loaded.states.tobytes() == model.states.tobytes()

    def test_rows_in_rank_order(self, tmp_path):
        model = PoreModel(make_states(16), k=2, name='m')
        path = tmp_path / 'out.model'
        save_model(model, str(path))

        lines = path.read_text().splitlines()
        assert lines[0] == '#model_name\tm'
        kmers = [line.split('\t')[0] for line in lines[1:]]
        assert kmers == [DNA_ALPHABET.unrank(i, 2) for i in range(16)]
        assert all(len(line.split('\t')) == 5 for line in lines[1:])

    def test_name_override(self, tmp_path):
        model = PoreModel(make_states(16), k=2, name='m')
        path = str(tmp_path / 'out.model')
        save_model(model, path, model_name='override')
        assert load_model(path).name == 'override'

    def test_write_method(self, tmp_path):
        model = PoreModel(make_states(16), k=2, name='m')
        path = str(tmp_path / 'out.model')
        model.write(path)
        assert load_model(path).states.tobytes() == model.states.tobytes()

    def test_scaled_model_writes_raw_table(self, tmp_path, scaling):
        model = PoreModel(make_states(16), k=2, name='m', scaling=scaling)
        path = str(tmp_path / 'out.model')
        save_model(model, path)
        assert load_model(path).states.tobytes() == model.states.tobytes()

    def test_empty_name_warns(self, tmp_path):
        model = PoreModel(make_states(16), k=2)
        path = str(tmp_path / 'out.model')
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            save_model(model, path)
            assert len(w) == 1
            assert "empty model name" in str(w[0].message)
        assert os.path.exists(path)

    def test_unwritable_destination(self, tmp_path):
        model = PoreModel(make_states(16), k=2, name='m')
        with pytest.raises(OSError):
            save_model(model, str(tmp_path / 'missing_dir' / 'out.model'))
