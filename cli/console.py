"""Console UI for alefbet application."""

from core.catalog import get_symbol_name
from core.config import ADVANCE_DELAY_SECONDS
from core.models import ExerciseKind
from cli.api_client import AlefbetAPIClient

HELP_TEXT = (
    'Commands: a number to answer, "place B S" / "remove S" / "move S T" for words,\n'
    '"y"/"n" to grade a drawing, "next" for a new round, "stats", "pause",\n'
    '"reset" to clear history, Enter to refresh, "exit" to quit'
)


class ConsoleUI:
    """Console user interface for alefbet application."""

    def __init__(self, client: AlefbetAPIClient):
        self.client = client

    def print_round(self, state: dict):
        """Print the current round and its options."""
        spec = state['round']
        print('\n' + '=' * 50)
        print(f"Score: {state['score']}")
        print('=' * 50)

        if state['error']:
            print(f"Error: {state['error']}")
            return
        if spec is None:
            print('Waiting for a round...')
            return

        kind = spec['exercise_kind']
        symbol = spec['target_symbol']
        if kind == ExerciseKind.LETTER_TO_PICTURE.value:
            print(f'Which picture starts with {symbol} ({get_symbol_name(symbol)})?')
            for i, item in enumerate(spec['image_options'], 1):
                print(f"  {i}. {item['word']}  [{item['image_ref']}]")
        elif kind == ExerciseKind.PICTURE_TO_LETTER.value:
            print(f"Which letter does this picture start with? [{spec['correct_item']['image_ref']}]")
            for i, option in enumerate(spec['symbol_options'], 1):
                print(f'  {i}. {option} ({get_symbol_name(option)})')
        elif kind == ExerciseKind.PICTURE_TO_WORD.value:
            print(f"Which word matches this picture? [{spec['correct_item']['image_ref']}]")
            for i, option in enumerate(spec['word_options'], 1):
                print(f'  {i}. {option}')
        elif kind == ExerciseKind.WORD_SCRAMBLE.value:
            print(f"Build the word for this picture: [{spec['correct_item']['image_ref']}]")
            slots = ' '.join(f'{i}:{letter or "_"}' for i, letter in enumerate(spec['arrangement'], 1))
            bank = ' '.join(f'{i}:{letter}' for i, letter in enumerate(spec['shuffled_letters'], 1))
            print(f'  Slots: {slots}')
            print(f'  Bank:  {bank}')
        elif kind == ExerciseKind.DRAWING.value:
            print(f'Draw the letter {symbol} ({get_symbol_name(symbol)}) on paper.')
            print('  Did it look right? (y/n)')

    def print_feedback(self, state: dict):
        """Print the outcome of the last answer, if any."""
        outcome = state['last_outcome']
        if outcome is None:
            return
        spec = state['round']
        print('-' * 40)
        if outcome:
            print('Correct!')
            print(f'Next round in {ADVANCE_DELAY_SECONDS:g}s (press Enter to refresh)')
        else:
            print('Not quite.')
            if spec and spec['exercise_kind'] != ExerciseKind.WORD_SCRAMBLE.value and spec['target_word']:
                print(f"The answer was: {spec['target_word']}")
        print('-' * 40)

    def print_stats(self, stats: dict):
        """Print the per-letter statistics table."""
        print('\n' + '=' * 70)
        print('LETTER STATISTICS')
        print('=' * 70)
        print(f"{'Letter':<12}{'Correct':>8}{'Wrong':>8}{'Total':>8}{'Success':>10}{'Weight':>9}{'Chance':>9}")
        for row in stats['rows']:
            rate = f"{row['success_rate']:.1f}%" if row['success_rate'] is not None else '-'
            print(f"{row['symbol']} {row['name']:<10}{row['correct']:>8}{row['incorrect']:>8}"
                  f"{row['total']:>8}{rate:>10}{row['weight']:>9.2f}{row['probability']:>8.1f}%")
        print(f"\nRecorded answers: {stats['total_records']}")
        if stats['recording_paused']:
            print('Recording is paused')
        print('=' * 70 + '\n')

    def answer_option(self, state: dict, number: int) -> dict:
        """Submit the numbered option of a choice round."""
        spec = state['round']
        kind = spec['exercise_kind']
        if kind == ExerciseKind.LETTER_TO_PICTURE.value:
            options = spec['image_options']
            submit = self.client.choose_image
        elif kind == ExerciseKind.PICTURE_TO_LETTER.value:
            options = spec['symbol_options']
            submit = self.client.choose_symbol
        elif kind == ExerciseKind.PICTURE_TO_WORD.value:
            options = spec['word_options']
            submit = self.client.choose_word
        else:
            print('This round has no numbered options.')
            return state
        if not 1 <= number <= len(options):
            print(f'Choose a number between 1 and {len(options)}.')
            return state
        return submit(options[number - 1])

    def handle_command(self, state: dict, user_input: str) -> dict | None:
        """Apply one command. Returns the new state, or None to quit."""
        parts = user_input.split()
        command = parts[0].lower() if parts else ''

        if command == 'exit':
            return None
        if command == '':
            return self.client.get_state()
        if command == 'help':
            print(HELP_TEXT)
            return state
        if command == 'next':
            return self.client.new_round()
        if command == 'stats':
            self.print_stats(self.client.get_stats())
            return state
        if command == 'pause':
            paused = self.client.toggle_recording()['recording_paused']
            print('Recording paused.' if paused else 'Recording resumed.')
            return state
        if command == 'reset':
            confirm = input('Delete all recorded answers? (yes/no) ').strip().lower()
            if confirm == 'yes':
                self.client.clear_history()
                print('History cleared.')
            return state
        if command in ('y', 'n'):
            return self.client.submit_drawing(command == 'y')
        if command in ('place', 'remove', 'move'):
            try:
                numbers = [int(p) - 1 for p in parts[1:]]
            except ValueError:
                print('Positions must be numbers.')
                return state
            if command == 'place' and len(numbers) == 2:
                return self.client.move_letter('bank', numbers[0], 'slot', numbers[1])
            if command == 'remove' and len(numbers) == 1:
                return self.client.move_letter('slot', numbers[0], 'bank', 0)
            if command == 'move' and len(numbers) == 2:
                return self.client.move_letter('slot', numbers[0], 'slot', numbers[1])
            print(HELP_TEXT)
            return state
        if command.isdigit() and state.get('round'):
            return self.answer_option(state, int(command))

        print(HELP_TEXT)
        return state

    def run(self):
        """Run the main application loop."""
        # Check server connection
        try:
            health = self.client.health_check()
            print(f"Connected to alefbet server ({health['service']})")
        except Exception:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        print('\nStarting Hebrew letter practice!')
        print(HELP_TEXT)

        state = self.client.get_state()
        while True:
            self.print_round(state)
            self.print_feedback(state)

            user_input = input('==> ').strip()
            try:
                new_state = self.handle_command(state, user_input)
            except Exception as e:
                print(f"Error talking to server: {e}")
                continue
            if new_state is None:
                print('Goodbye!')
                return
            state = new_state
