from realtyhub.cli import build_parser
from realtyhub.cli.roles import group_by_verb


def test_confirm_defaults_and_answers(scripted):
    console = scripted("", "", "y", "No", "YES")
    assert console.confirm("Continue?") is False
    assert console.confirm("Continue?", default=True) is True
    assert console.confirm("Continue?") is True
    assert console.confirm("Continue?", default=True) is False
    assert console.confirm("Continue?") is True


def test_ask_falls_back_to_default_and_hides_secrets(scripted):
    console = scripted("", "Dhaka", "hunter22")
    assert console.ask("City", default="Chittagong") == "Chittagong"
    assert console.ask("City") == "Dhaka"
    assert console.secret("Password") == "hunter22"
    assert console.prompts == ["City", "City", "Password"]
    assert console.hidden == ["Password"]


def test_table_renders_headers_and_rows(scripted):
    console = scripted()
    console.table(["Role", "Users"], [["admin", 1], ["[moderator]", 12]], title="Roles")
    output = console.term.export_text()
    assert "Roles" in output
    assert "Role" in output and "Users" in output
    assert "admin" in output
    assert "[moderator]" in output and "12" in output
    assert console.lines == []


def test_line_is_recorded_and_printed_verbatim(scripted):
    console = scripted()
    console.line("[bold]not markup[/bold]")
    assert console.lines == ["[bold]not markup[/bold]"]
    assert "[bold]not markup[/bold]" in console.term.export_text()



def test_group_by_verb():
    grouped = group_by_verb(["create posts", "view posts", "view users", "publish posts"])
    assert list(grouped.items()) == [
        ("create", ["posts"]),
        ("view", ["posts", "users"]),
        ("publish", ["posts"]),
    ]


def test_parser_knows_every_command():
    parser = build_parser()
    args = parser.parse_args(["acl:setup", "--force", "--no-user"])
    assert args.command == "acl:setup" and args.force and args.no_user
    args = parser.parse_args(["roles:show", "--users"])
    assert args.users and not args.permissions
    args = parser.parse_args(["admin:create", "--email", "a@b.co"])
    assert args.email == "a@b.co" and args.name is None
    args = parser.parse_args(["teams:backfill-personal", "--dry-run"])
    assert args.dry_run
