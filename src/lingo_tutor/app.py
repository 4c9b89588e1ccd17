"""Interactive CLI application."""
import logging
import os
import sqlite3
from datetime import date

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt

from lingo_tutor.catalog import get_grammar_exercises, get_grammar_pools
from lingo_tutor.config import LIMITS
from lingo_tutor.dashboard import (
    get_category_stats, get_grammar_overview, get_learner_summary,
    get_mastery_color, get_mastery_label,
)
from lingo_tutor.db import init_db, DEFAULT_DB_PATH
from lingo_tutor.errors import LingoTutorError
from lingo_tutor.logging_config import setup_logging
from lingo_tutor.mastery import difficulty_range, weakest_topic
from lingo_tutor.models import QUESTION_FILL_BLANK
from lingo_tutor.progress import (
    apply_quiz_answer, get_due_words, get_new_words, get_weekly_activity,
    introduce_words, log_daily_activity, record_activity, record_vocab_result,
)
from lingo_tutor.quiz import QUIZ_MODES, check_answer, compose_quiz, grammar_question, is_quizzable
from lingo_tutor.seed import seed_all, is_seeded

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_LEARNER = os.environ.get("LINGO_TUTOR_LEARNER", "local")
EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """The learner asked to leave the current session and return to the menu."""


def session_prompt(prompt: str, **kwargs) -> str:
    """Prompt.ask that raises SessionExitRequested when the learner types q or menu."""
    if "choices" in kwargs:
        kwargs["choices"] = list(kwargs["choices"]) + list(EXIT_WORDS)
        kwargs.setdefault("show_choices", False)
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str], default: str | None = None) -> int:
    if default is None:
        return int(session_prompt(prompt, choices=choices))
    return int(session_prompt(prompt, choices=choices, default=default))


def show_welcome():
    console.print(Panel(
        "[bold]Lingo Tutor[/bold]\n[dim]French vocabulary and grammar practice[/dim]",
        title="Bienvenue", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("learn", "Meet new words"),
        ("review", "Review due vocabulary"),
        ("drill", "Grammar topic drill"),
        ("quiz", "Mixed quiz"),
        ("dashboard", "Streak + progress"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")
    console.print("[dim]Type q or menu during a session to return here.[/dim]")


def finish_session(db_path: str, learner_id: str, today: date) -> None:
    """Count a completed session toward the streak."""
    streak = record_activity(db_path, learner_id, today)
    log_daily_activity(db_path, learner_id, today, sessions_completed=1)
    console.print(f"[bold]Streak: {streak.current_streak} day(s)[/bold]")


def run_review_session(db_path: str, learner_id: str, words: list, today: date) -> tuple[int, int]:
    if not words:
        console.print("[yellow]No words due right now![/yellow]")
        return 0, 0
    correct = 0
    console.print(f"\n[bold]Vocabulary Review[/bold] — {len(words)} words\n")
    for i, entry in enumerate(words, 1):
        console.print(Panel(entry.item.word, title=f"Word {i}/{len(words)}", border_style="cyan"))
        session_prompt("[dim]Press Enter to reveal the translation[/dim]", default="")
        console.print(Panel(entry.item.translation, border_style="green"))
        knew_it = session_prompt("Did you know it?", choices=["y", "n"]) == "y"
        state = record_vocab_result(db_path, learner_id, entry.item.id, knew_it, today)
        log_daily_activity(db_path, learner_id, today, questions_answered=1, correct_answers=int(knew_it))
        correct += int(knew_it)
        console.print(f"[dim]Next review in {state.interval_days} day(s)[/dim]\n")
    console.print(f"[bold]Score: {correct}/{len(words)}[/bold]\n")
    finish_session(db_path, learner_id, today)
    return correct, len(words)


def run_quiz_session(db_path: str, learner_id: str, questions: list, today: date) -> tuple[int, int]:
    if not questions:
        console.print("[yellow]No questions available![/yellow]")
        return 0, 0
    correct = 0
    console.print(f"\n[bold]Quiz[/bold] — {len(questions)} questions\n")
    for i, q in enumerate(questions, 1):
        console.print(f"[bold]Q{i}.[/bold] {q.text}\n")
        if q.kind == QUESTION_FILL_BLANK:
            response = session_prompt("Your answer")
        else:
            for n, option in enumerate(q.options, 1):
                console.print(f"  [cyan]{n})[/cyan] {option}")
            choices = [str(n) for n in range(1, len(q.options) + 1)]
            response = session_int_prompt("\nYour answer", choices=choices) - 1
        is_correct = check_answer(q, response)
        apply_quiz_answer(db_path, learner_id, q, is_correct, today)
        if is_correct:
            console.print("[green]Correct![/green]")
            correct += 1
        else:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{q.correct_answer}[/green]")
        console.print()
    console.print(f"[bold]Score: {correct}/{len(questions)} ({correct/len(questions)*100:.0f}%)[/bold]\n")
    finish_session(db_path, learner_id, today)
    return correct, len(questions)


def cmd_learn(db_path: str, learner_id: str):
    words = get_new_words(db_path, learner_id, limit=LIMITS.new_words)
    if not words:
        console.print("[green]You have met every word in the course![/green]")
        return
    table = Table(title="New Words")
    table.add_column("French", style="cyan")
    table.add_column("English")
    table.add_column("Example", style="dim")
    for w in words:
        table.add_row(w.word, w.translation, w.example_sentence)
    console.print(table)
    added = introduce_words(db_path, learner_id, [w.id for w in words], date.today())
    console.print(f"[green]{added} word(s) added to your reviews, first review tomorrow.[/green]")


def cmd_review(db_path: str, learner_id: str):
    today = date.today()
    words = get_due_words(db_path, learner_id, today, limit=LIMITS.due_words)
    run_review_session(db_path, learner_id, words, today)


def cmd_drill(db_path: str, learner_id: str):
    topics = get_grammar_overview(db_path, learner_id)
    if not topics:
        console.print("[yellow]No grammar topics available![/yellow]")
        return
    for t in topics:
        console.print(f"  [cyan]{t['topic_id']}[/cyan]) {t['title']} [dim]{t['mastery_percentage']:.0f}%[/dim]")
    weakest = weakest_topic(topics)
    suggested = weakest or topics[0]
    topic_id = session_int_prompt(
        "Select topic",
        choices=[str(t["topic_id"]) for t in topics],
        default=str(suggested["topic_id"]),
    )
    topic = next(t for t in topics if t["topic_id"] == topic_id)
    low, high = difficulty_range(topic["mastery_percentage"])
    exercises = get_grammar_exercises(
        db_path, topic_id, difficulty=(low, high), limit=LIMITS.drill_exercises,
    )
    questions = [grammar_question(ex) for ex in exercises if is_quizzable(ex)]
    console.print(f"\n[bold]Drilling: {topic['title']}[/bold] [dim](difficulty {low}-{high})[/dim]")
    run_quiz_session(db_path, learner_id, questions, date.today())


def cmd_quiz(db_path: str, learner_id: str):
    console.print("\n[bold]Practice Quiz[/bold]")
    mode = Prompt.ask("Quiz mode", choices=list(QUIZ_MODES), default="quick")
    count = QUIZ_MODES[mode]
    today = date.today()
    vocab_pool = get_due_words(db_path, learner_id, today, limit=count // 2)
    questions = compose_quiz(vocab_pool, get_grammar_pools(db_path), count)
    if len(questions) < count:
        console.print(f"[dim]Only {len(questions)} questions available today.[/dim]")
    run_quiz_session(db_path, learner_id, questions, today)


def cmd_dashboard(db_path: str, learner_id: str):
    today = date.today()
    summary = get_learner_summary(db_path, learner_id, today)
    console.print(Panel(
        f"Streak: [bold]{summary['current_streak']}[/bold] day(s)  "
        f"(best {summary['longest_streak']})\n"
        f"Words learned: [bold]{summary['words_learned']}[/bold]  |  "
        f"Mastered: [bold]{summary['words_mastered']}[/bold]  |  "
        f"Due today: [bold]{summary['due_today']}[/bold]",
        title="Progress", border_style="blue",
    ))

    table = Table(title="Vocabulary")
    table.add_column("Category", style="cyan")
    table.add_column("Learned", justify="right")
    table.add_column("Progress", justify="right")
    for cat in get_category_stats(db_path, learner_id):
        table.add_row(
            cat["name"], f"{cat['learned_count']}/{cat['word_count']}", f"{cat['mastery_percentage']}%",
        )
    console.print(table)

    topics = get_grammar_overview(db_path, learner_id)
    table = Table(title="Grammar")
    table.add_column("Topic", style="cyan")
    table.add_column("Mastery", justify="right")
    table.add_column("Status")
    for t in topics:
        color = get_mastery_color(t["mastery_percentage"])
        table.add_row(
            t["title"],
            f"{t['mastery_percentage']:.0f}%",
            f"[{color}]{get_mastery_label(t['mastery_percentage'])}[/{color}]",
        )
    console.print(table)

    week = get_weekly_activity(db_path, learner_id, today)
    if week:
        answered = sum(d["questions_answered"] for d in week)
        console.print(f"\n  This week: [bold]{len(week)}[/bold] active day(s), [bold]{answered}[/bold] answers")

    weakest = weakest_topic(topics)
    if weakest:
        console.print(f"\n  [yellow]Recommendation: drill {weakest['title']}[/yellow]")


def run_command(name: str, command, db_path: str, learner_id: str) -> None:
    """Run one menu command; any failure returns the learner to the menu."""
    try:
        command(db_path, learner_id)
    except SessionExitRequested:
        console.print("\n[dim]Progress saved. Back to the menu.[/dim]")
    except KeyboardInterrupt:
        console.print("\n[dim]Use 'quit' to exit.[/dim]")
    except LingoTutorError as e:
        logger.warning("%s failed: %s", name, e)
        console.print(f"[red]Error: {e}[/red]")
    except sqlite3.Error as e:
        logger.error("%s failed on the database: %s", name, e)
        console.print(f"[red]Database error: {e}. Try again in a moment.[/red]")


def main():
    db_path = DEFAULT_DB_PATH
    learner_id = DEFAULT_LEARNER
    setup_logging(console=console)
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome()

    commands = {
        "learn": cmd_learn,
        "review": cmd_review,
        "drill": cmd_drill,
        "quiz": cmd_quiz,
        "dashboard": cmd_dashboard,
    }
    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]À bientôt ![/dim]")
            break
        command = commands.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        run_command(choice, command, db_path, learner_id)


if __name__ == "__main__":
    main()
