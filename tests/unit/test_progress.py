from __future__ import annotations

from unittest.mock import Mock, patch

from ad_enricher.services.progress import RowProgress, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch('sys.stdout.isatty', return_value=True):
        assert is_tty_enabled() is True

    with patch('sys.stdout.isatty', return_value=False):
        assert is_tty_enabled() is False


class TestRowProgress:
    """Test cases for RowProgress."""

    def test_init_with_tty_enabled(self):
        with patch('ad_enricher.services.progress.is_tty_enabled', return_value=True), \
             patch('ad_enricher.services.progress.tqdm') as mock_tqdm:

            progress = RowProgress(5, description="Lookups")

            assert progress.total_rows == 5
            assert progress.enabled is True
            mock_tqdm.assert_called_once_with(
                total=5,
                desc="Lookups",
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def test_init_with_tty_disabled(self):
        with patch('ad_enricher.services.progress.is_tty_enabled', return_value=False):
            progress = RowProgress(5)
            assert progress.enabled is False
            assert progress.pbar is None
            progress.advance(True, 1)
            assert progress.current_row == 1

    def test_advance_updates_bar_and_postfix(self):
        mock_pbar = Mock()
        with patch('ad_enricher.services.progress.is_tty_enabled', return_value=True), \
             patch('ad_enricher.services.progress.tqdm', return_value=mock_pbar):
            progress = RowProgress(3)
            progress.advance(True, 1)
            progress.advance(False, 1)

        assert mock_pbar.update.call_count == 2
        mock_pbar.set_postfix.assert_called_with(matched=1, unmatched=1)

    def test_context_manager_closes_bar(self):
        mock_pbar = Mock()
        with patch('ad_enricher.services.progress.is_tty_enabled', return_value=True), \
             patch('ad_enricher.services.progress.tqdm', return_value=mock_pbar):
            with RowProgress(1) as progress:
                pass
        mock_pbar.close.assert_called_once()
        assert progress.pbar is None
