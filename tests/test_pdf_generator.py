import io
from dataclasses import replace

import pytest

from conftest import make_item
from installation_document import SectionKind, build_installation_document
from pdf_generator import InstallationGuidePDF, export_installation_guide, render_pdf_bytes, verbatim_markup


@pytest.fixture
def document(closet_snapshot):
    return build_installation_document(closet_snapshot)


def test_render_pdf_bytes(document):
    data = render_pdf_bytes(document, company_name="BlueDog Group", page_size="a4")
    assert data.startswith(b"%PDF")


def test_export_writes_named_file(document, tmp_path):
    notices = []
    result = export_installation_guide(
        document, output_dir=str(tmp_path / "out"), notify=lambda level, msg: notices.append((level, msg)),
    )
    assert result.success
    assert result.path.endswith("Network Closet-installation-guide.pdf")
    with open(result.path, "rb") as f:
        assert f.read(4) == b"%PDF"
    assert notices == [("success", "Installation guide exported as PDF")]


def test_export_failure_is_reported_not_raised(document, tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    notices = []
    result = export_installation_guide(
        document, output_dir=str(blocker), notify=lambda level, msg: notices.append((level, msg)),
    )
    assert not result.success
    assert result.path is None
    assert result.message.startswith("Failed to generate PDF")
    assert [level for level, _ in notices] == ["error"]


def test_export_with_conflicts_and_tall_rack(closet_snapshot, tmp_path):
    equipment = closet_snapshot.equipment + (
        make_item("extra", 4, name="Extra Switch"),
        make_item("storage", 20, height=4, power=300.0, name="Storage <Array> & Co"),
    )
    snapshot = replace(closet_snapshot, equipment=equipment, spec=replace(closet_snapshot.spec, total_units=42))
    result = export_installation_guide(build_installation_document(snapshot), output_dir=str(tmp_path),
                                       page_size="tabloid")
    assert result.success


def test_verbatim_markup_keeps_spacing_and_escapes():
    assert verbatim_markup("Label every cable  at both ends") == "Label every cable &nbsp;at both ends"
    assert verbatim_markup("A & B\nthen <C>") == "A &amp; B<br/>then &lt;C&gt;"
    assert verbatim_markup("single spaces only") == "single spaces only"


def test_notes_keep_their_spacing(closet_snapshot):
    snapshot = replace(closet_snapshot, notes=("Label every cable  at both ends",))
    notes = build_installation_document(snapshot).section(SectionKind.NOTES).content[0]
    flowables = InstallationGuidePDF(io.BytesIO())._content_flowables(notes)
    assert "cable &nbsp;at" in flowables[0].text
