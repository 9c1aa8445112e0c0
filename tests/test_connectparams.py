import io

from jetdb.connectparams import ConnectParams


def test_set_connect_string_pairs():
    params = ConnectParams()
    params.set_connect_string("DSN=foo;Database=/tmp/x.mdb")
    assert params.table == {"DSN": "foo", "Database": "/tmp/x.mdb"}


def test_set_connect_string_trims_name_end_and_value_start():
    params = ConnectParams()
    params.set_connect_string("DSN =  foo ; Database\t=\t/tmp/x.mdb")
    assert params.table["DSN"] == "foo "
    # a leading space of a name after ';' is kept
    assert params.table[" Database"] == "/tmp/x.mdb"


def test_set_connect_string_later_value_replaces_earlier():
    params = ConnectParams()
    params.set_connect_string("A=1;A=2")
    assert params.table == {"A": "2"}


def test_set_connect_string_value_with_equals_is_rescanned():
    params = ConnectParams()
    params.set_connect_string("A=b=c")
    assert params.table == {"A": "b=c", "b": "c"}


def test_set_connect_string_without_pairs():
    params = ConnectParams()
    params.set_connect_string("nothing here")
    assert params.table == {}


def test_extract_dsn():
    params = ConnectParams()
    assert params.extract_dsn("DSN=  mydb;Database=other") == "mydb"
    assert params.dsn_name == "mydb"


def test_extract_dsn_missing():
    params = ConnectParams()
    assert params.extract_dsn("DBQ=file.mdb") is None
    assert params.dsn_name == ""


def test_extract_dsn_without_equals():
    params = ConnectParams()
    assert params.extract_dsn("DSN only") is None


def test_extract_dbq_stores_in_dsn_name():
    params = ConnectParams()
    assert params.extract_dbq("DBQ=nwind.mdb") == "nwind.mdb"
    assert params.dsn_name == "nwind.mdb"


def test_get_connect_param_from_ini(tmp_path):
    ini = tmp_path / "odbc.ini"
    ini.write_text("[mydb]\nDatabase = /data/file.mdb\nEmpty =\n")
    params = ConnectParams(dsn_name="mydb")
    assert params.get_connect_param("Database", [ini]) == "/data/file.mdb"
    assert params.get_connect_param("Empty", [ini]) is None
    assert params.get_connect_param("Missing", [ini]) is None


def test_get_connect_param_later_file_wins(tmp_path):
    system = tmp_path / "system.ini"
    user = tmp_path / "user.ini"
    system.write_text("[mydb]\nDatabase = /system.mdb\n")
    user.write_text("[mydb]\nDatabase = /user.mdb\n")
    params = ConnectParams(dsn_name="mydb")
    assert params.get_connect_param("Database", [system, user]) == "/user.mdb"


def test_get_connect_param_unknown_section(tmp_path):
    ini = tmp_path / "odbc.ini"
    ini.write_text("[other]\nDatabase = /x.mdb\n")
    params = ConnectParams(dsn_name="mydb")
    assert params.get_connect_param("Database", [ini]) is None


def test_get_connect_param_missing_file(tmp_path):
    params = ConnectParams(dsn_name="mydb")
    assert params.get_connect_param("Database", [tmp_path / "absent.ini"]) is None


def test_dump_params(capsys):
    params = ConnectParams(dsn_name="mydb")
    params.set_connect_string("A=1;B=2")
    out = io.StringIO()
    params.dump_params(out)
    assert out.getvalue() == "Parameter: A, Value: 1\nParameter: B, Value: 2\n"
    assert "mydb" in capsys.readouterr().err