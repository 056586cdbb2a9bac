import json

import pytest

import image_toolbox_cli as cli


@pytest.fixture
def sample_png(tmp_path, solid, png_bytes):
    img = solid(20, 20, (255, 255, 255))
    img[6:14, 6:14, :3] = (0, 0, 0)
    path = tmp_path / "logo.png"
    path.write_bytes(png_bytes(img))
    return path


def test_remove_bg_writes_output(sample_png, decode_rgba, capsys):
    assert cli.main(["remove-bg", str(sample_png)]) == 0
    out = sample_png.with_name("logo_nobg.png")
    assert out.exists()
    assert decode_rgba(out.read_bytes())[0, 0, 3] == 0
    assert "Background #FFFFFF" in capsys.readouterr().out


def test_palette_json(sample_png, tmp_path, capsys):
    outdir = tmp_path / "out"
    assert cli.main(["palette", str(sample_png), "--colors", "2", "--json", "--outdir", str(outdir)]) == 0
    payload = json.loads((outdir / "logo_palette.json").read_text())
    assert payload["source"] == "logo.png"
    assert len(payload["colors"]) == 2
    assert payload["colors"][0]["hex"] == "#FFFFFF"
    assert "#FFFFFF" in capsys.readouterr().out


def test_folder_run_continues_past_bad_files(tmp_path, sample_png, capsys):
    (tmp_path / "broken.png").write_bytes(b"not really a png")
    assert cli.main(["resize", str(tmp_path), "--width", "10"]) == 1
    assert (tmp_path / "logo_resized.png").exists()
    captured = capsys.readouterr()
    assert "broken.png" in captured.err
    assert "1 failed" in captured.out


def test_folder_skips_previous_outputs(tmp_path, sample_png):
    assert cli.main(["remove-bg", str(tmp_path)]) == 0
    assert cli.main(["remove-bg", str(tmp_path)]) == 0
    assert not (tmp_path / "logo_nobg_nobg.png").exists()


def test_convert_and_favicon(sample_png):
    assert cli.main(["convert", str(sample_png), "--to", "jpeg"]) == 0
    assert sample_png.with_name("logo.jpg").exists()

    assert cli.main(["favicon", str(sample_png), "--sizes", "16,32", "--padding", "2"]) == 0
    assert sample_png.with_name("logo_favicon_16.png").exists()
    assert sample_png.with_name("logo_favicon_32.png").exists()


def test_convert_to_same_format_does_not_overwrite(sample_png):
    original = sample_png.read_bytes()
    assert cli.main(["convert", str(sample_png), "--to", "png"]) == 0
    assert sample_png.read_bytes() == original
    assert sample_png.with_name("logo_converted.png").exists()


def test_compress(sample_png, capsys):
    assert cli.main(["compress", str(sample_png), "--quality", "0.5", "--format", "webp"]) == 0
    assert sample_png.with_name("logo_compressed.webp").exists()
    assert "Saved" in capsys.readouterr().out


def test_missing_source(tmp_path):
    assert cli.main(["palette", str(tmp_path / "nope.png")]) == 2


def test_invalid_arguments_exit(sample_png):
    with pytest.raises(SystemExit):
        cli.main(["palette", str(sample_png), "--colors", "0"])
    with pytest.raises(SystemExit):
        cli.main(["favicon", str(sample_png), "--background", "blue"])


def test_unwritable_output_does_not_stop_the_folder(tmp_path, solid, png_bytes, capsys):
    for name in ("a.png", "b.png"):
        (tmp_path / name).write_bytes(png_bytes(solid(8, 8, (255, 255, 255))))
    (tmp_path / "a_nobg.png").mkdir()

    assert cli.main(["remove-bg", str(tmp_path)]) == 1
    assert (tmp_path / "b_nobg.png").is_file()
    captured = capsys.readouterr()
    assert "a.png" in captured.err
    assert "1 failed" in captured.out
