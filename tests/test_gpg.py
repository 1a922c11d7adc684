import pytest

from gitsignverifier.config import Config
from gitsignverifier.gpg import (
    GpgContext,
    GpgError,
    Signature,
    SignatureSummary,
    _parse_status,
    create_gpg_context,
    verify_gpg_signature_result,
)


def test_no_signature_is_rejected():
    with pytest.raises(GpgError, match="No signature found"):
        verify_gpg_signature_result([])


def test_clean_signature_is_accepted(capsys):
    assert verify_gpg_signature_result([Signature("ABCDEF")]) is None
    assert "   Verify key ABCDEF" in capsys.readouterr().out


def test_missing_key_is_rejected():
    sig = Signature("ABCDEF", SignatureSummary.KEY_MISSING)
    with pytest.raises(GpgError, match="Unknown GPG key, missing in keyring"):
        verify_gpg_signature_result([sig])


def test_first_error_is_reported():
    sig = Signature("ABCDEF", SignatureSummary.KEY_EXPIRED | SignatureSummary.KEY_REVOKED)
    with pytest.raises(GpgError, match="GPG key revoked"):
        verify_gpg_signature_result([sig])


def test_sig_expired_is_rejected():
    sig = Signature("ABCDEF", SignatureSummary.SIG_EXPIRED)
    with pytest.raises(GpgError, match="Signature expired"):
        verify_gpg_signature_result([sig])


def test_good_signature_first_is_enough():
    sigs = [Signature("AAAA"), Signature("BBBB", SignatureSummary.KEY_MISSING)]
    assert verify_gpg_signature_result(sigs) is None


def test_errors_from_earlier_signatures_persist():
    sigs = [Signature("AAAA", SignatureSummary.KEY_MISSING), Signature("BBBB")]
    with pytest.raises(GpgError, match="Unknown GPG key"):
        verify_gpg_signature_result(sigs)


def test_parse_good_signature():
    output = (
        "[GNUPG:] NEWSIG\n"
        "[GNUPG:] GOODSIG 1122334455667788 Test User <test@example.com>\n"
        "[GNUPG:] VALIDSIG FPRFPRFPR 2024-01-01 1700000000 0 4 0 1 10 00 FPRFPRFPR\n"
        "[GNUPG:] TRUST_ULTIMATE 0 pgp\n"
    )
    sigs = _parse_status(output)
    assert len(sigs) == 1
    assert sigs[0].fingerprint == "FPRFPRFPR"
    assert SignatureSummary.VALID in sigs[0].summary
    assert SignatureSummary.KEY_MISSING not in sigs[0].summary


def test_parse_missing_key():
    output = (
        "gpg: some noise\n"
        "[GNUPG:] NEWSIG\n"
        "[GNUPG:] ERRSIG 1122334455667788 1 10 00 1700000000 9 FPRFPRFPR\n"
        "[GNUPG:] NO_PUBKEY 1122334455667788\n"
    )
    sigs = _parse_status(output)
    assert [s.fingerprint for s in sigs] == ["FPRFPRFPR"]
    assert SignatureSummary.KEY_MISSING in sigs[0].summary


def test_parse_expired_and_revoked_keys():
    output = (
        "[GNUPG:] NEWSIG\n"
        "[GNUPG:] EXPKEYSIG AAAA Test User <test@example.com>\n"
        "[GNUPG:] NEWSIG\n"
        "[GNUPG:] REVKEYSIG BBBB Test User <test@example.com>\n"
    )
    sigs = _parse_status(output)
    assert [s.fingerprint for s in sigs] == ["AAAA", "BBBB"]
    assert SignatureSummary.KEY_EXPIRED in sigs[0].summary
    assert SignatureSummary.KEY_REVOKED in sigs[1].summary


def test_create_context_uses_configured_home():
    assert create_gpg_context(Config("/some/home")).home_dir == "/some/home"
    assert create_gpg_context(Config()).home_dir is None


def test_verify_garbage_signature_raises(tmp_path):
    ctx = GpgContext(str(tmp_path / "nohome"))
    with pytest.raises(GpgError):
        ctx.verify_detached("not a signature", b"payload")


def test_sign_without_secret_key_raises(tmp_path):
    ctx = GpgContext(str(tmp_path / "nohome"))
    with pytest.raises(GpgError):
        ctx.sign_detached(b"payload")