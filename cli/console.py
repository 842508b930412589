"""Console UI for the scripture memory game."""

from core.config import DIFFICULTIES, GAME_MODES, MAX_HINTS
from core.rounds import GameRound, answers_match
from cli.api_client import ScriptureAPIClient


class ConsoleUI:
    """Console user interface for the flashcard, matching and fill-in-the-blank games."""

    def __init__(self, client: ScriptureAPIClient):
        self.client = client
        self.state = None

    def print_status(self, state: dict):
        """Print detailed status."""
        stats = state['stats']
        settings = state['settings']
        level_progress = state['level_progress']
        print('\n' + '=' * 50)
        print('STATUS SUMMARY')
        print('=' * 50)
        print(f'\nPlayer: {state["user_id"] or "Guest"}')
        print(f'Level {stats["level"]} ({level_progress["current"]}/{level_progress["needed"]} XP to next)')
        print(f'Total score: {stats["total_score"]} | Total XP: {stats["total_xp"]}')
        print(f'Games played: {stats["games_played"]}')
        if stats['total_attempts']:
            accuracy = stats['total_correct_answers'] / stats['total_attempts'] * 100
            print(f'Accuracy: {accuracy:.1f}% ({stats["total_correct_answers"]}/{stats["total_attempts"]})')
        print(f'Daily streak: {stats["daily_streak"]} (longest {stats["longest_streak"]})')
        print(f'\nVerses mastered: {stats["verses_mastered"]}')
        print(f'Verses in review: {stats["verses_in_review"]}')
        print(f'Badges: {len(stats["unlocked_badges"])}')
        print(f'\nDeck: {settings["selected_deck_id"]} | Mode: {settings["game_mode"]} | Difficulty: {settings["difficulty"]}')
        print('\n' + '=' * 50 + '\n')

    def print_decks(self):
        data = self.client.get_decks()
        print('\n' + '-' * 40)
        for deck in data['decks']:
            lock = '' if deck.get('unlocked') else f' [locked until level {deck["unlock_level"]}]'
            mastered = deck.get('mastered_count', 0)
            print(f'  {deck["id"]:<12} {deck["name"]} ({mastered}/{deck["card_count"]} mastered){lock}')
        print('-' * 40)

    def print_badges(self):
        data = self.client.get_badges()
        print('\n' + '-' * 40)
        for badge in data['badges']:
            mark = '*' if badge['unlocked'] else ' '
            print(f'  [{mark}] {badge["name"]}: {badge["description"]}')
        print('-' * 40)

    def print_leaderboard(self):
        data = self.client.get_leaderboard()
        for title, entries in (('LOCAL', data['local']), ('GLOBAL', data['global'])):
            print(f'\n{title} LEADERBOARD')
            if not entries:
                print('  (empty)')
            for i, entry in enumerate(entries[:10], 1):
                print(f'  {i:>2}. {entry["name"]:<16} {entry["score"]:>6}  {entry["mode"]}  {entry["date"]}')

    def print_round_result(self, result: dict, game_round: GameRound):
        """Print the outcome of a finished round."""
        print('\n' + '=' * 40)
        print('ROUND COMPLETE')
        print('=' * 40)
        print(f'Correct: {game_round.correct_answers}/{game_round.total_questions}')
        if game_round.total_time:
            print(f'Best combo: {game_round.max_combo}')
            print(f'Time left: {game_round.time_remaining}s')
        print(f'Score: {result["score"]}')
        print(f'XP earned: {result["xp_earned"]}')
        print('=' * 40)
        for badge in result['new_badges']:
            print(f'\n*** BADGE UNLOCKED: {badge["name"]} - {badge["description"]} ***')
        stats = result['state']['stats']
        print(f'\nLevel {stats["level"]} | Total XP {stats["total_xp"]} | Streak {stats["daily_streak"]}\n')

    def login(self, create: bool = False):
        user_id = input('User name: ').strip()
        password = input('Password: ').strip()
        if create:
            confirm = input('Confirm password: ').strip()
            result = self.client.signup(user_id, password, confirm)
        else:
            result = self.client.login(user_id, password)
        if not result['success']:
            print(f"Error: {result['error']}")
            return
        self.state = result['state']
        print(f'Signed in as {self.state["user_id"]}')

    def play_card(self, card: dict, game_round: GameRound) -> str | None:
        """Ask every blank of one card. Returns 'exit' when the player quits."""
        blanks = card['blanks']
        if not blanks:
            return None
        advanced = game_round.difficulty == 'advanced'
        answers = [None] * len(blanks)
        card_correct = 0

        print(f'\n{card["reference"]}')
        index = 0
        while index < len(blanks):
            if game_round.is_time_up:
                return None
            display = card['display']
            for answer in answers:
                if answer is not None:
                    display = display.replace('______', answer, 1)
            print(f'\n>>> {display}')
            print(f'[{game_round.time_remaining}s | combo {game_round.combo_streak} | '
                  f'blank {index + 1}/{len(blanks)}]')
            user_input = input('==> ').strip()

            if user_input.lower() == 'exit':
                return 'exit'

            elif user_input.lower() == 'hint':
                if game_round.use_hint():
                    print(f'Hint: {card["hints"][index]} '
                          f'({game_round.max_hints - game_round.hints_used} left)')
                else:
                    print('No hints available.')
                continue

            elif user_input.lower() == 'skip' and not advanced:
                game_round.record_answer(False)
                print(f'Answer: {blanks[index]}')
                answers[index] = blanks[index]
                index += 1
                continue

            elif user_input == '':
                continue

            if answers_match(user_input, blanks[index]):
                game_round.record_answer(True)
                card_correct += 1
                print(f'Correct! Combo x{game_round.combo_streak}')
            else:
                game_round.record_answer(False)
                if advanced:
                    print('Wrong, try again.')
                    continue
                print(f'Wrong. Answer: {blanks[index]}')
            answers[index] = blanks[index]
            index += 1

        self.client.dispatch('UPDATE_CARD_PROGRESS', card_id=card['card_id'],
                             deck_id=card['deck_id'], correct=card_correct == len(blanks))
        return None

    def finish_round(self, game_round: GameRound, mode: str, deck_id: str):
        """Submit a finished round and show the result."""
        if game_round.total_questions == 0:
            print('No answers given, round discarded.')
            return
        game_round.finish()
        result = self.client.complete_round(
            correct=game_round.correct_answers,
            total=game_round.total_questions,
            time_remaining=game_round.time_remaining,
            max_combo=game_round.max_combo,
            hints_used=game_round.hints_used,
            mode=mode,
            deck_id=deck_id
        )
        self.state = result['state']
        self.print_round_result(result, game_round)

    def play(self):
        """Play one round of the selected game mode on the selected deck."""
        settings = self.state['settings']
        mode = settings['game_mode']
        if mode == 'flashcards':
            self.play_flashcards(settings['selected_deck_id'])
        elif mode == 'matching':
            self.play_matching(settings['selected_deck_id'], settings['difficulty'])
        else:
            self.play_fill_blanks(settings['selected_deck_id'], settings['difficulty'])

    def play_flashcards(self, deck_id: str):
        """Untimed self-graded review of every card in the deck."""
        deck = self.client.get_deck(deck_id)
        game_round = GameRound(self.state['settings']['difficulty'], total_time=0)
        print(f'\nFlashcards: {deck["name"]} ({len(deck["cards"])} cards)')
        print('Press Enter to reveal, "hint" for a hint, "exit" to stop')

        for card in deck['cards']:
            print(f'\n>>> {card["reference"]}')
            user_input = input('==> ').strip().lower()
            if user_input == 'exit':
                break
            if user_input == 'hint':
                print(f'Hint: {card["hint"]}')
                if input('==> ').strip().lower() == 'exit':
                    break
            print(f'\n{card["text"]}\n')

            answer = ''
            while answer not in ('m', 'r'):
                answer = input('Mark as (m)astered or (r)eview? ').strip().lower()
            mastered = answer == 'm'
            game_round.record_answer(mastered)
            self.client.dispatch('UPDATE_CARD_PROGRESS', card_id=card['id'],
                                 deck_id=card['deck_id'], correct=mastered)
            if mastered:
                self.client.dispatch('MASTER_CARD', card_id=card['id'], deck_id=card['deck_id'])

        self.finish_round(game_round, 'flashcards', deck_id)

    def play_matching(self, deck_id: str, difficulty: str):
        """Timed round pairing each reference with its verse."""
        data = self.client.get_matching(deck_id, difficulty)
        references = data['references']
        scriptures = data['scriptures']
        letters = 'abcdefghijklmnopqrstuvwxyz'
        game_round = GameRound(difficulty, total_time=data['total_time'])
        matched = set()

        print(f'\nMatching: {deck_id} | Difficulty: {difficulty} | Time: {data["total_time"]}s')
        print('Pair a reference with a verse, e.g. "1 b". "exit" to stop')

        while len(matched) < len(references) and not game_round.is_time_up:
            print()
            for i, item in enumerate(references):
                if item['card_id'] not in matched:
                    print(f'  {i + 1}. {item["text"]}')
            print()
            for i, item in enumerate(scriptures):
                if item['card_id'] not in matched:
                    print(f'  {letters[i]}) {item["text"]}')
            print(f'[{game_round.time_remaining}s | combo {game_round.combo_streak}]')

            user_input = input('==> ').strip().lower()
            if user_input == 'exit':
                break
            parts = user_input.split()
            if (len(parts) != 2 or not parts[0].isdigit()
                    or not 1 <= int(parts[0]) <= len(references)
                    or parts[1] not in letters[:len(scriptures)]):
                print('Enter a reference number and a verse letter, e.g. "1 b"')
                continue
            reference = references[int(parts[0]) - 1]
            scripture = scriptures[letters.index(parts[1])]
            if reference['card_id'] in matched or scripture['card_id'] in matched:
                print('Already matched.')
                continue

            is_match = reference['card_id'] == scripture['card_id']
            game_round.record_answer(is_match)
            if is_match:
                matched.add(reference['card_id'])
                print(f'Match! Combo x{game_round.combo_streak}')
            else:
                print('Not a match.')

        if game_round.is_time_up:
            print("\nTime's up!")
        self.finish_round(game_round, 'matching', deck_id)

    def play_fill_blanks(self, deck_id: str, difficulty: str):
        """Play one timed fill-in-the-blank round."""
        data = self.client.get_blanks(deck_id, difficulty)
        game_round = GameRound(difficulty, total_time=data['total_time'])

        print(f'\nDeck: {deck_id} | Difficulty: {difficulty} | Time: {data["total_time"]}s')
        if MAX_HINTS[difficulty]:
            print(f'Type "hint" for a hint ({data["max_hints"]} per round)')
        if difficulty != 'advanced':
            print('Type "skip" to reveal the answer')

        for card in data['cards']:
            if self.play_card(card, game_round) == 'exit' or game_round.is_time_up:
                break

        if game_round.is_time_up:
            print("\nTime's up!")
        self.finish_round(game_round, 'fill-blanks', deck_id)

    def handle_command(self, command: str, arg: str) -> bool:
        """Run one menu command. Returns False to quit."""
        if command == 'exit':
            return False
        elif command == 'play':
            self.play()
        elif command == 'status':
            self.state = self.client.get_state()
            self.print_status(self.state)
        elif command == 'decks':
            self.print_decks()
        elif command == 'deck':
            self.state = self.client.dispatch('SET_DECK', deck_id=arg)
            print(f'Deck: {self.state["settings"]["selected_deck_id"]}')
        elif command == 'difficulty':
            if arg not in DIFFICULTIES:
                print(f'Choose one of: {", ".join(DIFFICULTIES)}')
            else:
                self.state = self.client.dispatch('SET_DIFFICULTY', difficulty=arg)
                print(f'Difficulty: {self.state["settings"]["difficulty"]}')
        elif command == 'mode':
            if arg not in GAME_MODES:
                print(f'Choose one of: {", ".join(GAME_MODES)}')
            else:
                self.state = self.client.dispatch('SET_GAME_MODE', mode=arg)
                print(f'Game mode: {self.state["settings"]["game_mode"]}')
        elif command == 'resetdeck':
            deck_id = arg or self.state['settings']['selected_deck_id']
            if input(f'Reset mastered verses in {deck_id}? (y/n) ').strip().lower() == 'y':
                self.state = self.client.dispatch('RESET_DECK_MASTERED', deck_id=deck_id)
                print(f'Mastered verses in {deck_id} reset.')
        elif command == 'badges':
            self.print_badges()
        elif command == 'leaderboard':
            self.print_leaderboard()
        elif command == 'login':
            self.login()
        elif command == 'signup':
            self.login(create=True)
        elif command == 'logout':
            self.state = self.client.logout()['state']
            print('Signed out.')
        elif command == 'reset':
            if input('Reset all progress? (y/n) ').strip().lower() == 'y':
                self.state = self.client.dispatch('RESET_PROGRESS')
                print('Progress reset.')
        else:
            print('Commands: play, status, decks, deck <id>, mode <name>, difficulty <level>, '
                  'badges, leaderboard, login, signup, logout, reset, resetdeck [id], exit')
        return True

    def shutdown(self):
        """Close the server session so pending progress is saved."""
        if self.client.session_id:
            try:
                self.client.end_session()
            except Exception as e:
                print(f"Error closing session: {e}")

    def run(self):
        """Run the main application loop."""
        # Check server connection
        try:
            health = self.client.health_check()
            print(f"Connected to scripture server ({health['service']})")
        except Exception:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        self.state = self.client.start_session()
        stats = self.state['stats']
        print(f"Restored: level {stats['level']}, {stats['games_played']} games, "
              f"{stats['verses_mastered']} verses mastered")
        print('\nStarting scripture memory practice!')
        print('Type "help" for commands\n')

        while True:
            parts = input('> ').strip().split(maxsplit=1)
            if not parts:
                continue
            command = parts[0].lower()
            arg = parts[1].strip() if len(parts) > 1 else ''
            try:
                if not self.handle_command(command, arg):
                    break
            except Exception as e:
                print(f"Error running {command}: {e}")

        print('Goodbye!')
        self.shutdown()
