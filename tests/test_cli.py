from tests.factories import make_csv


def test_import_csv_command_prints_counts(app, tmp_path):
    roster = tmp_path / "roster.csv"
    roster.write_text(make_csv(
        "E1,Ada,ada@example.com,Engineer,R&D,London,,,,",
        "E2,,grace@example.com,Admiral,Navy,Arlington,,,,",
    ))

    result = app.test_cli_runner().invoke(args=["import-csv", str(roster)])

    assert result.exit_code == 0
    assert "1 created" in result.output
    assert "1 rejected" in result.output
    assert "Row 2 (E2): name is required" in result.output


def test_import_csv_command_fails_on_fatal_error(app, tmp_path):
    roster = tmp_path / "empty.csv"
    roster.write_text("employee_id,name\n")

    result = app.test_cli_runner().invoke(args=["import-csv", str(roster)])

    assert result.exit_code == 1
    assert "FATAL" in result.output


def test_import_csv_command_refuses_viewer(app, tmp_path):
    roster = tmp_path / "roster.csv"
    roster.write_text(make_csv("E1,Ada,ada@example.com,Engineer,R&D,London,,,,"))

    result = app.test_cli_runner().invoke(args=["import-csv", str(roster), "--role", "viewer"])

    assert result.exit_code != 0
    assert "may not run CSV imports" in result.output
