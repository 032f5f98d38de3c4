import logging
import subprocess

from wedlock.symbols import CxxFiltDemangler, classify_symbol, is_itanium_encoding


def test_one_to_four_underscores_then_z_is_mangled() -> None:
    assert is_itanium_encoding("_Z3foov")
    assert is_itanium_encoding("__Z3foov")
    assert is_itanium_encoding("___Z3foov")
    assert is_itanium_encoding("____Z3foov")


def test_zero_or_five_underscores_is_not_mangled() -> None:
    assert not is_itanium_encoding("Z3foov")
    assert not is_itanium_encoding("_____Z3foov")


def test_degenerate_names_are_not_mangled() -> None:
    assert not is_itanium_encoding("")
    assert not is_itanium_encoding("_")
    assert not is_itanium_encoding("____")
    assert not is_itanium_encoding("_main")
    assert not is_itanium_encoding("main")


def test_classify_only_demangles_matching_names() -> None:
    calls = []

    def demangler(name: str):
        calls.append(name)
        return {"_Z3foov": "foo()"}.get(name)

    info = classify_symbol("_Z3foov", demangler)
    assert info.is_mangled
    assert info.demangled_name == "foo()"

    info = classify_symbol("main", demangler)
    assert not info.is_mangled
    assert info.demangled_name is None
    assert calls == ["_Z3foov"]


def test_failed_demangle_is_absent_not_an_error() -> None:
    info = classify_symbol("_Zgarbage", lambda name: None)
    assert info.is_mangled
    assert info.demangled_name is None

    info = classify_symbol("_Zgarbage", lambda name: name)
    assert info.is_mangled
    assert info.demangled_name is None


def test_cxxfilt_missing_tool_yields_none(monkeypatch) -> None:
    monkeypatch.setattr("wedlock.symbols.shutil.which", lambda _name: None)
    demangler = CxxFiltDemangler()
    assert demangler("_Z3foov") is None


def test_cxxfilt_caches_results(monkeypatch) -> None:
    runs = []

    def fake_run(cmd, **kwargs):
        runs.append(cmd)
        return subprocess.CompletedProcess(cmd, 0, stdout="foo()\n", stderr="")

    monkeypatch.setattr("wedlock.symbols.shutil.which", lambda _name: "/usr/bin/c++filt")
    monkeypatch.setattr("wedlock.symbols.subprocess.run", fake_run)

    demangler = CxxFiltDemangler()
    assert demangler("_Z3foov") == "foo()"
    assert demangler("_Z3foov") == "foo()"
    assert runs == [["/usr/bin/c++filt", "_Z3foov"]]


def test_cxxfilt_unchanged_output_means_failure(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 0, stdout=cmd[-1] + "\n", stderr="")

    monkeypatch.setattr("wedlock.symbols.shutil.which", lambda _name: "/usr/bin/c++filt")
    monkeypatch.setattr("wedlock.symbols.subprocess.run", fake_run)

    assert CxxFiltDemangler()("_Zbogus") is None


def test_raising_demangler_leaves_name_undemangled(caplog) -> None:
    def broken(name: str):
        raise ValueError("bad grammar")

    diag = logging.getLogger("tests.wedlock.symbols")
    with caplog.at_level(logging.INFO):
        info = classify_symbol("_Z3foov", broken, diag)
    assert info.is_mangled
    assert info.demangled_name is None
    assert "Demangler failed on _Z3foov" in caplog.text
