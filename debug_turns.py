import sys, os
ROOT=os.path.dirname(__file__); SRC=os.path.join(ROOT,'src');
if SRC not in sys.path: sys.path.insert(0,SRC)
from turnkeeper.events.bus import (
    EventBus, EVENT_ADVANCE_TURN_REQUEST, EVENT_GRANT_TEMP_TURN_REQUEST, EVENT_SET_TURN_DISABLED_REQUEST,
    EVENT_TURN_ADVANCED, EVENT_ROUND_STARTED, EVENT_TEMP_TURN_GRANTED, EVENT_TEMP_TURN_ENDED,
)
from turnkeeper.components.turn_entry import TurnEntry
from turnkeeper.components.turn_group import TurnGroup
from turnkeeper.systems.turn_system import TurnSystem
from turnkeeper.ui.turn_bar import TurnBarViewModel
from turnkeeper.world import create_world, create_unit

bus=EventBus(); world=create_world(bus); turns=TurnSystem(world,bus); view=TurnBarViewModel()
for name in (EVENT_TURN_ADVANCED, EVENT_ROUND_STARTED, EVENT_TEMP_TURN_GRANTED, EVENT_TEMP_TURN_ENDED):
    bus.subscribe(name, lambda sender, _name=name, **payload: print(_name, payload))
for unit_id in ('u1','u2','u3','u4'): create_unit(world,bus,unit_id)
turns.set_turn_order([TurnEntry.unit('u1'),TurnEntry.unit('u2'),TurnEntry.group('g1')],[TurnGroup('g1','Pack',('u3','u4'))])

def show():
    frame=view.update(turns.state(),turns.units())
    print('  round', frame.round, 'current', frame.current_label, 'dir', frame.direction, 'flash', frame.round_flash,
          'temp', frame.temp_label, '->', frame.resume_label)

show()
for _ in range(3): bus.emit(EVENT_ADVANCE_TURN_REQUEST); show()
bus.emit(EVENT_SET_TURN_DISABLED_REQUEST, unit_id='u2', turn_disabled=True)
bus.emit(EVENT_ADVANCE_TURN_REQUEST); show()
bus.emit(EVENT_GRANT_TEMP_TURN_REQUEST, target='unit:u4'); show()
bus.emit(EVENT_ADVANCE_TURN_REQUEST); show()
