"""Unit tests for the deterministic engine components (sanitizer, leakage scrub, retry)."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from engine.leakage import scrub_english_leakage
from engine.sanitizer import sanitize
from engine.translator import coerce_sentiment, parse_json_reply
from schemas.completion import ChatMessage, CompletionRequest
from schemas.response import Sentiment
from services.llm_service import chat_completion, retry_with_backoff


# ── Sanitizer tests ────────────────────────────────────────────────────

class TestSanitizer:
    def test_pipe_truncation(self):
        assert sanitize("Headline text | utm_source=twitter") == "Headline text"

    def test_leading_pipe_keeps_full_text(self):
        assert sanitize("| Bitcoin rallies again") == "| Bitcoin rallies again"

    def test_urls_removed(self):
        out = sanitize("Check https://example.com/x now for the latest market update")
        assert "http" not in out
        assert out == "Check now for the latest market update"

    def test_www_and_short_links_removed(self):
        out = sanitize("Visit www.example.com or t.co/abc123 for details on the airdrop")
        assert out == "Visit or for details on the airdrop"

    def test_script_and_style_removed(self):
        html = (
            "<html><head><style>p{color:red}</style></head>"
            "<body><p>Bitcoin rallies past resistance</p><script>alert(1)</script></body></html>"
        )
        assert sanitize(html) == "Bitcoin rallies past resistance"

    def test_block_elements_do_not_glue_words(self):
        assert sanitize("<p>Ethereum upgrade</p><p>goes live today</p>") == "Ethereum upgrade goes live today"

    def test_tracking_parameters_removed(self):
        out = sanitize("Ethereum upgrade goes live source=twitter utm_medium=social ref=homepage")
        assert out == "Ethereum upgrade goes live"

    def test_query_string_removed(self):
        assert sanitize("Solana validators vote today ?id=42&lang=en") == "Solana validators vote today"

    def test_entity_named_parameters_removed(self):
        assert sanitize("Ether ETF decision expected ?page=2&not=1&times=3") == "Ether ETF decision expected"
        assert sanitize("<p>Ether ETF decision expected ?id=7&para=2&sect=4</p>") == "Ether ETF decision expected"

    def test_real_entities_still_decoded(self):
        assert sanitize("<p>Fees &amp; rewards rise on Solana</p>") == "Fees & rewards rise on Solana"

    def test_inline_elements_do_not_split_words(self):
        html = "<p>Bit<b>coin</b>'s price hit $<span>70</span>k today</p>"
        assert sanitize(html) == "Bitcoin's price hit $70k today"

    def test_line_breaks_separate_words(self):
        assert sanitize("Bitcoin steady<br>Ether climbs") == "Bitcoin steady Ether climbs"

    def test_boilerplate_removed(self):
        assert sanitize("Read more: Solana network restored after outage [...]") == (
            "Solana network restored after outage"
        )

    def test_corrupted_ellipsis_removed(self):
        assert sanitize("Markets cool down after rally [‚Ä¶]") == "Markets cool down after rally"
        assert sanitize("Markets cool down after rally […]") == "Markets cool down after rally"

    def test_whitespace_collapsed(self):
        assert sanitize("Bitcoin   miners\n\n\n  sell  reserves") == "Bitcoin miners sell reserves"

    def test_short_content_returns_empty(self):
        assert sanitize("<b>Hi</b>") == ""
        assert sanitize("RSVP: now") == ""

    def test_empty_input(self):
        assert sanitize("") == ""

    def test_plain_text_unchanged(self):
        text = "Bitcoin ETF inflows hit a weekly record."
        assert sanitize(text) == text

    def test_resanitizing_is_stable(self):
        once = sanitize("<div>Read more: Cardano <b>hard fork</b> scheduled https://x.io | ad</div>")
        assert once == "Cardano hard fork scheduled"
        assert sanitize(once) == once

    def test_parser_failure_uses_degraded_path(self):
        with patch("engine.sanitizer.BeautifulSoup", side_effect=RuntimeError("boom")):
            out = sanitize("<p>Solana news</p> | extra https://x.y")
        assert out == "Solana news"


# ── Leakage scrub tests ────────────────────────────────────────────────

class TestLeakageScrub:
    def test_trailing_english_sentence_removed(self):
        assert scrub_english_leakage("Fiyat yükseldi. The price increased sharply today.") == "Fiyat yükseldi."

    def test_discourse_marker_sentence_removed(self):
        text = "Bitcoin 70 bin doları aştı. However, analysts remain cautious. Yatırımcılar temkinli."
        assert scrub_english_leakage(text) == "Bitcoin 70 bin doları aştı. Yatırımcılar temkinli."

    def test_according_to_removed(self):
        text = "Borsa listelemeyi duyurdu. According to the exchange, trading opens Monday."
        assert scrub_english_leakage(text) == "Borsa listelemeyi duyurdu."

    def test_consecutive_english_sentences_removed(self):
        text = "Ağ güncellendi. The fork is live. The fees dropped."
        assert scrub_english_leakage(text) == "Ağ güncellendi."

    def test_capitalized_subject_with_auxiliary_removed(self):
        text = "Token listelendi. Binance has confirmed the listing."
        assert scrub_english_leakage(text) == "Token listelendi."

    def test_negated_auxiliary_sentence_removed(self):
        assert scrub_english_leakage("Fiyat düştü. Bitcoin hasn't recovered yet.") == "Fiyat düştü."
        assert scrub_english_leakage("Fiyat düştü. Regulators won’t comment.") == "Fiyat düştü."

    def test_turkish_word_starting_like_auxiliary_kept(self):
        text = "Fiyat düştü. Borsa hasar tespitini sürdürüyor."
        assert scrub_english_leakage(text) == text

    def test_trailing_fragment_removed(self):
        text = "Ethereum fiyatı yüzde 5 yükseldi ve the market was"
        assert scrub_english_leakage(text) == "Ethereum fiyatı yüzde 5 yükseldi ve"

    def test_trailing_capitalized_word_removed(self):
        assert scrub_english_leakage("Piyasa bugün sakin seyretti Analysts") == "Piyasa bugün sakin seyretti"

    def test_repeated_periods_collapsed(self):
        assert scrub_english_leakage("Fiyat yükseldi.. Hacim arttı...") == "Fiyat yükseldi. Hacim arttı."

    def test_turkish_text_unchanged(self):
        text = "Bitcoin yeni bir rekor kırdı. Analistler yükselişin süreceğini düşünüyor."
        assert scrub_english_leakage(text) == text

    def test_unlisted_opener_passes_through(self):
        # Denylist heuristic: openers outside the list are not detected.
        text = "Fiyat yükseldi. Analysts expect more gains."
        assert scrub_english_leakage(text) == text


# ── Reply parsing tests ───────────────────────────────────────────────

class TestReplyParsing:
    def test_code_fences_stripped(self):
        raw = '```json\n{"summary": "Özet metni burada.", "sentiment": "neutral"}\n```'
        assert parse_json_reply(raw) == {"summary": "Özet metni burada.", "sentiment": "neutral"}

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError):
            parse_json_reply("not json at all")

    def test_non_object_yields_empty_mapping(self):
        assert parse_json_reply('["summary"]') == {}
        assert parse_json_reply("null") == {}

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("positive", Sentiment.POSITIVE),
            (" Negative ", Sentiment.NEGATIVE),
            ("neutral", Sentiment.NEUTRAL),
            ("ecstatic", Sentiment.NEUTRAL),
            (None, Sentiment.NEUTRAL),
            (1, Sentiment.NEUTRAL),
        ],
    )
    def test_sentiment_coercion(self, raw, expected):
        assert coerce_sentiment(raw) == expected


# ── Retry tests ────────────────────────────────────────────────────────

class TestRetryWithBackoff:
    def test_exhaustion_reraises_last_error(self):
        errors = [RuntimeError("first"), RuntimeError("second"), RuntimeError("third")]
        op = AsyncMock(side_effect=errors)
        sleep = AsyncMock()

        with pytest.raises(RuntimeError) as exc_info:
            asyncio.run(retry_with_backoff(op, 3, 1.0, sleep=sleep))

        assert exc_info.value is errors[-1]
        assert op.await_count == 3
        delays = [c.args[0] for c in sleep.await_args_list]
        assert delays == [1.0, 2.0]
        assert sum(delays) == pytest.approx(3.0)

    def test_success_after_failure(self):
        op = AsyncMock(side_effect=[ConnectionError("reset"), "ok"])
        sleep = AsyncMock()

        assert asyncio.run(retry_with_backoff(op, 3, 0.5, sleep=sleep)) == "ok"
        assert op.await_count == 2
        assert [c.args[0] for c in sleep.await_args_list] == [0.5]

    def test_first_success_never_sleeps(self):
        op = AsyncMock(return_value=42)
        sleep = AsyncMock()

        assert asyncio.run(retry_with_backoff(op, sleep=sleep)) == 42
        sleep.assert_not_awaited()

    def test_single_attempt_budget(self):
        op = AsyncMock(side_effect=ValueError("bad"))
        sleep = AsyncMock()

        with pytest.raises(ValueError, match="bad"):
            asyncio.run(retry_with_backoff(op, 1, 1.0, sleep=sleep))
        assert op.await_count == 1
        sleep.assert_not_awaited()

    def test_invalid_budget_rejected(self):
        with pytest.raises(ValueError):
            asyncio.run(retry_with_backoff(AsyncMock(), 0))


# ── Completion adapter tests ───────────────────────────────────────────

def _client_returning(response) -> SimpleNamespace:
    create = AsyncMock(return_value=response)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _request() -> CompletionRequest:
    return CompletionRequest(
        model="test-model",
        messages=[ChatMessage(role="system", content="sys"), ChatMessage(role="user", content="hello")],
        temperature=0.3,
    )


class TestChatCompletion:
    def test_returns_first_choice_content(self):
        response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="merhaba"))])
        fake = _client_returning(response)
        with patch("services.llm_service.get_client", return_value=fake):
            assert asyncio.run(chat_completion(_request())) == "merhaba"

        kwargs = fake.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.3
        assert "max_tokens" not in kwargs
        assert kwargs["messages"][1] == {"role": "user", "content": "hello"}

    def test_missing_choices_yield_empty_string(self):
        fake = _client_returning(SimpleNamespace(choices=[]))
        with patch("services.llm_service.get_client", return_value=fake):
            assert asyncio.run(chat_completion(_request())) == ""

    def test_null_content_yields_empty_string(self):
        response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=None))])
        fake = _client_returning(response)
        with patch("services.llm_service.get_client", return_value=fake):
            assert asyncio.run(chat_completion(_request())) == ""

    def test_transport_error_propagates(self):
        fake = _client_returning(None)
        fake.chat.completions.create.side_effect = ConnectionError("refused")
        with patch("services.llm_service.get_client", return_value=fake):
            with pytest.raises(ConnectionError):
                asyncio.run(chat_completion(_request()))
