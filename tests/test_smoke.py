import smoke_test


def test_smoke_run(mixed_pdf, tmp_path, capsys):
    out = str(tmp_path / "smoke.pdf")
    assert smoke_test.main([mixed_pdf, "--out", out]) == 0
    printed = capsys.readouterr().out
    assert "SMOKE_OK" in printed
    assert "Extracted 7 fields" in printed


def test_smoke_with_explicit_values(scenario_pdf, tmp_path, capsys):
    out = str(tmp_path / "smoke.pdf")
    assert smoke_test.main([scenario_pdf, "--out", out, "--values", '{"Name": "Ada"}']) == 0
    assert "SMOKE_OK" in capsys.readouterr().out


def test_smoke_exit_codes(tmp_path, capsys):
    assert smoke_test.main([]) == 1
    bogus = tmp_path / "bogus.pdf"
    bogus.write_text("nope")
    assert smoke_test.main([str(bogus)]) == 2
    assert smoke_test.main([str(bogus).replace("bogus", "absent")]) == 1
