from pathlib import Path

from air_fetch.core import layout
from air_fetch.core.layout import resolve_subdir, target_dir
from air_fetch.core.urn import parse_urn


def test_flat_layout_is_base_dir():
    assert resolve_subdir("checkpoint", "flux-dev", structured=False) == Path("")
    assert resolve_subdir("lora", "sdxl", structured=False) == Path("")


def test_flux_checkpoint_override():
    assert resolve_subdir("checkpoint", "flux-dev", structured=True) == Path("unet")
    assert resolve_subdir("checkpoint", "flux1", structured=True) == Path("unet")


def test_default_pluralizes_type():
    assert resolve_subdir("lora", "sdxl", structured=True) == Path("loras")
    assert resolve_subdir("checkpoint", "sd1", structured=True) == Path("checkpoints")
    # only checkpoints are special-cased for flux
    assert resolve_subdir("lora", "flux-dev", structured=True) == Path("loras")


def test_override_match_is_case_sensitive():
    assert resolve_subdir("Checkpoint", "flux-dev", structured=True) == Path("Checkpoints")


def test_overrides_are_data(monkeypatch):
    rows = layout.LAYOUT_OVERRIDES + [{"ecosystem": r".*", "type": r"^embedding$", "dir": "embeddings/textual"}]
    monkeypatch.setattr(layout, "LAYOUT_OVERRIDES", rows)
    assert resolve_subdir("embedding", "sd1", structured=True) == Path("embeddings/textual")
    assert resolve_subdir("checkpoint", "flux-dev", structured=True) == Path("unet")


def test_target_dir(tmp_path):
    ident = parse_urn("urn:air:sdxl:lora:civitai:1@2")
    assert target_dir(tmp_path, ident, structured=True) == tmp_path / "loras"
    assert target_dir(tmp_path, ident, structured=False) == tmp_path
